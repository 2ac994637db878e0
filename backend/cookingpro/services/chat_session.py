"""
Chat session state: message history, saved recipes and the current plan.
Each user turn goes through the model gateway exactly once.
"""
import time
import uuid
from typing import Callable, Dict, List, Optional, Union

from cookingpro.core.constants import PromptConstants
from cookingpro.core.exceptions import ModelCallError, SessionBusyError
from cookingpro.core.logging import get_logger
from cookingpro.models.schema import (
    GenerationResult,
    MealPlan,
    Message,
    Recipe,
    SessionSummary,
    UserPreferences,
)
from cookingpro.services.model_gateway import ModelGateway

logger = get_logger("services.chat_session")

DEFAULT_SESSION_IDLE_SECONDS = 2 * 60 * 60


def welcome_message() -> Message:
    return Message(
        id=PromptConstants.WELCOME_MESSAGE_ID,
        role="model",
        text=PromptConstants.WELCOME_MESSAGE,
    )


class ChatSession:
    """
    Conversation with the chef for one user.

    History only grows until clear_history() or logout(). Turns must not
    overlap: send_message() refuses to start while one is outstanding.
    """

    def __init__(
        self,
        session_id: str,
        gateway: ModelGateway,
        preferences: Optional[UserPreferences] = None,
        zen_mode: bool = False,
    ):
        self.session_id = session_id
        self.gateway = gateway
        self.preferences = preferences
        self.zen_mode = zen_mode
        self.messages: List[Message] = [welcome_message()]
        self.recipes: List[Recipe] = []
        self.current_meal_plan: Optional[MealPlan] = None
        self.is_loading = False

    async def send_message(
        self,
        text: str,
        image: Optional[Union[bytes, str]] = None,
        hidden_prompt: Optional[str] = None,
        image_mime_type: str = "image/jpeg",
    ) -> GenerationResult:
        """
        Run one turn.

        The visible text is recorded as the user message; hidden_prompt, when
        given, is what the model receives instead.

        Returns:
            The turn's result. On a failed model call this is the static
            apology with no payload.

        Raises:
            SessionBusyError: If a previous turn is still outstanding
            ConfigurationError: If no model credential is configured
        """
        if self.is_loading:
            raise SessionBusyError(f"Session {self.session_id} is already waiting for a reply")

        history = list(self.messages)
        image_bytes = image if isinstance(image, bytes) else None
        self.messages.append(Message(id=_new_message_id(), role="user", text=text, image=image_bytes))
        self.is_loading = True

        try:
            result = await self.gateway.generate(
                history,
                hidden_prompt or text,
                self.preferences,
                image=image,
                zen_mode=self.zen_mode,
                image_mime_type=image_mime_type,
            )
        except ModelCallError as e:
            logger.error(f"Chat turn failed for session {self.session_id}: {e}")
            result = GenerationResult(text=PromptConstants.TURN_FAILURE_MESSAGE)
            self.messages.append(Message(id=_new_message_id(), role="model", text=result.text))
            return result
        finally:
            self.is_loading = False

        self.messages.append(
            Message(
                id=_new_message_id(),
                role="model",
                text=result.text,
                recipe=result.recipe,
                meal_plan=result.meal_plan,
            )
        )
        if result.recipe is not None:
            self.save_recipe(result.recipe)
        if result.meal_plan is not None:
            self.current_meal_plan = result.meal_plan
        return result

    def save_recipe(self, recipe: Recipe) -> bool:
        """Add a recipe to the front of the collection unless its id is already saved."""
        if any(saved.id == recipe.id for saved in self.recipes):
            return False
        self.recipes.insert(0, recipe)
        return True

    def clear_history(self) -> None:
        self.messages = [welcome_message()]

    def logout(self) -> None:
        """Forget everything tied to the user, including cached responses."""
        self.clear_history()
        self.recipes = []
        self.current_meal_plan = None
        self.gateway.reset()

    def summary(self) -> SessionSummary:
        return SessionSummary(
            session_id=self.session_id,
            messages=list(self.messages),
            recipes=list(self.recipes),
            current_meal_plan=self.current_meal_plan,
            is_loading=self.is_loading,
        )


class SessionStore:
    """
    In-process registry of chat sessions, each with its own gateway and cache.

    Sessions untouched for idle_ttl seconds are logged out and dropped the
    next time the store is accessed. A session with a turn in flight is kept.
    """

    def __init__(
        self,
        gateway_factory: Callable[[], ModelGateway],
        idle_ttl: Optional[float] = DEFAULT_SESSION_IDLE_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.gateway_factory = gateway_factory
        self.idle_ttl = idle_ttl
        self._clock = clock
        self._sessions: Dict[str, ChatSession] = {}
        self._last_seen: Dict[str, float] = {}

    def get_or_create(self, session_id: str) -> ChatSession:
        self.prune_idle()
        session = self._sessions.get(session_id)
        if session is None:
            session = ChatSession(session_id, self.gateway_factory())
            self._sessions[session_id] = session
            logger.info(f"Started chat session {session_id}")
        self._last_seen[session_id] = self._clock()
        return session

    def get(self, session_id: str) -> Optional[ChatSession]:
        self.prune_idle()
        session = self._sessions.get(session_id)
        if session is not None:
            self._last_seen[session_id] = self._clock()
        return session

    def remove(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if session is None:
            return False
        session.logout()
        return True

    def prune_idle(self) -> int:
        """Drop sessions idle for longer than idle_ttl. Returns how many went."""
        if self.idle_ttl is None:
            return 0

        cutoff = self._clock() - self.idle_ttl
        stale = [
            session_id
            for session_id, seen in self._last_seen.items()
            if seen < cutoff and not self._sessions[session_id].is_loading
        ]
        for session_id in stale:
            self.remove(session_id)
        if stale:
            logger.info(f"Expired {len(stale)} idle chat session(s)")
        return len(stale)

    def __len__(self) -> int:
        return len(self._sessions)


def _new_message_id() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
