"""Core board types, configuration and exceptions."""

from scrum_board.core.config import ScrumConfig, StorageBackend
from scrum_board.core.exceptions import *  # noqa: F403
from scrum_board.core.exceptions import __all__ as exceptions__all__
from scrum_board.core.types import *  # noqa: F403
from scrum_board.core.types import __all__ as types__all__

__all__ = [
    "ScrumConfig",
    "StorageBackend",
]

__all__ += exceptions__all__
__all__ += types__all__
