from tools.tool import Tool, ToolSet, tool
from tools.goal_tools import goal_tools
from tools.progress_tools import progress_tools
from tools.projection_tools import projection_tools
from tools.habit_tools import habit_tools

all_tools = goal_tools + progress_tools + projection_tools + habit_tools
toolset = ToolSet(all_tools)

__all__ = [
    'Tool',
    'ToolSet',
    'tool',
    'goal_tools',
    'progress_tools',
    'projection_tools',
    'habit_tools',
    'toolset'
]
