# Things URL scheme: command builders and dispatcher

from .commands import (
    Command, build_add_todo, build_add_project, build_update_todo,
    build_update_project, build_search, build_show
)
from .dispatcher import URLSchemeDispatcher, DispatchResult

__all__ = [
    'Command', 'build_add_todo', 'build_add_project', 'build_update_todo',
    'build_update_project', 'build_search', 'build_show',
    'URLSchemeDispatcher', 'DispatchResult'
]
