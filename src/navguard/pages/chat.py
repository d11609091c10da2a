"""Chat panel page object: prompt buttons, message input and replies."""

from __future__ import annotations

import dataclasses
import logging

from navguard.engine import conditions
from navguard.engine.interaction import InteractionExecutor
from navguard.engine.protocols import ActionOutcome, BrowserSession, ErrorKind, Locator, WaitResult
from navguard.engine.readiness import ReadinessDetector
from navguard.engine.response import ResponseWatcher, has_meaningful_response
from navguard.engine.waiter import ConditionWaiter

logger = logging.getLogger("navguard.pages.chat")


@dataclasses.dataclass(frozen=True)
class ChatLocators:
    container: Locator = Locator("#page-aichat")
    prompt_buttons: Locator = Locator("button.AIChat_prompt__WYQFV")
    input: Locator = Locator("textarea[name='message']")
    submit: Locator = Locator("button.AIChat_submit__ciifR")
    messages: Locator = Locator(".AIChat_list__1KKWq li")
    answers: Locator = Locator(".AIChatMessage_answer__LLofQ")
    loading: Locator = Locator(".AIChat_service__piLWs")

    @property
    def last_answer(self) -> Locator:
        return Locator(f"{self.messages.selector}:last-child {self.answers.selector}")


# Short names for the canned prompts, by button position.
PROMPT_ALIASES = {
    "twitter post": 0,
    "generate a concise and engaging twitter post": 0,
    "summary": 1,
    "give me a summary of this data": 1,
    "trends": 2,
    "identify bullish or bearish trends": 2,
}


class ChatPanel:
    """The assistant chat window."""

    def __init__(
        self,
        session: BrowserSession,
        executor: InteractionExecutor,
        watcher: ResponseWatcher,
        readiness: ReadinessDetector,
        waiter: ConditionWaiter | None = None,
        locators: ChatLocators | None = None,
    ) -> None:
        self._session = session
        self._executor = executor
        self._watcher = watcher
        self._readiness = readiness
        self._waiter = waiter or readiness.waiter
        self.locators = locators or ChatLocators()

    def is_open(self, timeout: float = 10.0) -> bool:
        result = self._waiter.wait(
            conditions.element_visible(self.locators.container),
            timeout,
            description="chat panel",
        )
        return result.ok

    def prompt_buttons(self) -> list[str]:
        return [(b.inner_text() or "").strip() for b in self._session.find_elements(self.locators.prompt_buttons)]

    def click_prompt(self, text: str, timeout: float = 10.0) -> ActionOutcome:
        """Click a canned prompt by caption or short alias."""
        visible = self._waiter.wait(
            conditions.element_visible(self.locators.prompt_buttons),
            timeout,
            description="prompt buttons",
        )
        buttons = self._session.find_elements(self.locators.prompt_buttons) if visible.ok else []
        logger.info("Found %d prompt buttons", len(buttons))

        index = PROMPT_ALIASES.get(text.strip().lower())
        if index is None:
            wanted = text.strip().casefold()
            index = next(
                (i for i, b in enumerate(buttons) if (b.inner_text() or "").strip().casefold() == wanted),
                None,
            )
        if index is None or index >= len(buttons):
            logger.error("Prompt button %r not found", text)
            return ActionOutcome(
                succeeded=False,
                strategy_used=None,
                error=ErrorKind.INTERACTION_FAILED,
                action="click",
                target=str(self.locators.prompt_buttons),
                detail=f"prompt button {text!r} not found",
            )
        return self._executor.click(buttons[index])

    def enter_message(self, text: str) -> ActionOutcome:
        return self._executor.type(self.locators.input, text)

    def submit(self) -> ActionOutcome:
        return self._executor.click(self.locators.submit)

    def message_count(self) -> int:
        return self._watcher.count(self.locators.messages)

    def await_response(self, previous_count: int, timeout: float | None = None) -> WaitResult[int]:
        return self._watcher.await_growth(self.locators.messages, previous_count, timeout)

    def send(self, text: str, timeout: float | None = None) -> WaitResult[int] | ActionOutcome:
        """Type and submit *text*, then wait for the message list to grow.

        Returns the failed ActionOutcome if typing or submitting failed.
        """
        before = self.message_count()
        for outcome in (self.enter_message(text), self.submit()):
            if not outcome.succeeded:
                return outcome
        return self.await_response(before, timeout)

    def responses(self) -> list[str]:
        return [(a.inner_text() or "").strip() for a in self._session.find_elements(self.locators.answers)]

    def has_proper_response(self, loading_timeout: float = 30.0) -> bool:
        """True if the assistant's latest reply is a meaningful answer."""
        self._readiness.await_loading_complete(self.locators.loading, loading_timeout)

        if not self._session.find_elements(self.locators.messages):
            logger.warning("No messages found in the chat")
            return False

        responses = self.responses()
        if not self._session.find_elements(self.locators.last_answer):
            logger.warning("Last message is not an assistant response")
            # Only a lengthy earlier answer can still count.
            responses.append("")
        return has_meaningful_response(responses)
