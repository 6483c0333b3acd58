# Storage layer: read-only access to the Things database

from .database import ThingsDatabase, find_database_path, is_app_running
from .models import Todo, ChecklistItem, Project, ProjectSummary, Area, Tag
from .queries import Query, QueryBuilder

__all__ = [
    'ThingsDatabase', 'find_database_path', 'is_app_running',
    'Todo', 'ChecklistItem', 'Project', 'ProjectSummary', 'Area', 'Tag',
    'Query', 'QueryBuilder'
]
