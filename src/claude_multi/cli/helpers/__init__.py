"""
CLI helper functions and utilities.
"""

from .display import instances_table, providers_table, show_instance_details, show_mcp_servers
from .errors import handle_errors
from .prompts import COPY_ALL, COPY_NONE, COPY_SETTINGS, prompt_api_key, prompt_copy_mode

__all__ = [
    'handle_errors',
    'instances_table',
    'providers_table',
    'show_instance_details',
    'show_mcp_servers',
    'prompt_copy_mode',
    'prompt_api_key',
    'COPY_NONE',
    'COPY_SETTINGS',
    'COPY_ALL',
]
