import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from console_errors import ConsoleError, ValidationError
from directives import SESSION_END_DIRECTIVE, directive_names

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Output:
    lines: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True)
class SessionEnded(Output):
    """The script closed the engine session."""


CommandResult = Union[Output, SessionEnded]


class CommandInterpreter:
    """Submits command scripts to the engine and classifies the replies.

    Blank scripts raise ValidationError without touching the network; engine
    failures surface as NetworkError or BackendError from the client.
    """

    def __init__(self, client):
        self.client = client
        self.loading = False
        self.last_result: Optional[CommandResult] = None
        self.error: Optional[str] = None

    async def execute(self, script: str) -> CommandResult:
        if not script or not script.strip():
            raise ValidationError("The command input is empty. Enter a command or load a script file.")

        names = directive_names(script)
        logger.info("executing %d directive(s): %s", len(names), " ".join(names))
        self.loading = True
        try:
            reply = await self.client.analyze(script)
        except ConsoleError as exc:
            self.error = str(exc)
            raise
        finally:
            self.loading = False

        self.error = None
        if reply.session_ended is not None:
            ended = reply.session_ended
        else:
            ended = SESSION_END_DIRECTIVE in names

        result = SessionEnded(list(reply.results)) if ended else Output(list(reply.results))
        self.last_result = result
        return result

    def reset(self):
        self.last_result = None
        self.error = None
