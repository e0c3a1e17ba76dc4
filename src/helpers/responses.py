import json
from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class SimpleResponse:
    """The reply of a command handler. `code` names the refusal when the command was refused."""

    message: str
    ephemeral: bool = False
    code: str | Any = None

    def __str__(self):
        return json.dumps(asdict(self), ensure_ascii=False, default=str)

    def __repr__(self):
        return self.__str__()
