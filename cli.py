import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from tools import toolset
from tracking.errors import GoalTrackingError

logger = logging.getLogger("cli")


# ANSI color codes for CLI output formatting
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"


def to_jsonable(result: Any) -> Any:
    """Convert tool results (models, lists of models) to plain JSON values"""
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(result, list):
        return [to_jsonable(item) for item in result]
    return result


def execute_tool_call(tool_name: str, arguments: Dict[str, Any]) -> Any:
    """Execute a named tool with the given arguments"""
    tool = toolset.get_tool_by_name(tool_name)
    if not tool:
        raise ValueError(f"Tool '{tool_name}' not found")

    return tool.execute(**arguments)


def print_formatted_tool_call(tool_name: str, arguments: Dict[str, Any]):
    """Print a formatted representation of a tool call with colors"""
    print(f"{Colors.BOLD}{Colors.CYAN}[TOOL CALL] {tool_name}{Colors.RESET}")
    print(f"{Colors.CYAN}Arguments: {Colors.RESET}")

    formatted_args = json.dumps(arguments, indent=2, default=str)
    formatted_args = "\n".join(f"  {Colors.CYAN}{line}{Colors.RESET}" for line in formatted_args.split("\n"))
    print(formatted_args)


def print_formatted_tool_result(tool_name: str, result: Any):
    """Print a formatted representation of a tool result with colors"""
    result_str = json.dumps(to_jsonable(result), default=str, indent=2)
    print(f"{Colors.BOLD}{Colors.GREEN}[TOOL RESULT] {tool_name}{Colors.RESET}")

    formatted_result = "\n".join(f"  {Colors.GREEN}{line}{Colors.RESET}" for line in result_str.split("\n"))
    print(formatted_result)


def print_tool_list():
    """Print every available tool with its parameters"""
    for description in toolset.get_descriptions():
        print(f"{Colors.BOLD}{description['name']}{Colors.RESET} - {description['description']}")
        for name, text in description["parameters"].items():
            marker = "*" if name in description["required"] else " "
            print(f"  {marker} {Colors.CYAN}{name}{Colors.RESET}: {text}")


def check_color_support():
    """Disable colors when NO_COLOR is set or output is not a terminal"""
    # Check for NO_COLOR environment variable (https://no-color.org/)
    if os.getenv("NO_COLOR") is not None or not sys.stdout.isatty():
        for attr in dir(Colors):
            if not attr.startswith("__"):
                setattr(Colors, attr, "")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tempo",
        description="Track goals and reconcile their progress"
    )
    parser.add_argument("tool", help="Tool to run, or 'tools' to list them")
    parser.add_argument("arguments", nargs="?", default="{}", help="Tool arguments as a JSON object")
    parser.add_argument("--quiet", action="store_true", help="Only print the result")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run one tool from the command line; returns the exit code"""
    check_color_support()
    args = build_parser().parse_args(argv)

    if args.tool == "tools":
        print_tool_list()
        return 0

    try:
        arguments = json.loads(args.arguments)
    except json.JSONDecodeError as e:
        print(f"{Colors.RED}Arguments must be a JSON object: {e}{Colors.RESET}", file=sys.stderr)
        return 2
    if not isinstance(arguments, dict):
        print(f"{Colors.RED}Arguments must be a JSON object{Colors.RESET}", file=sys.stderr)
        return 2

    if not args.quiet:
        print_formatted_tool_call(args.tool, arguments)

    try:
        result = execute_tool_call(args.tool, arguments)
    except (GoalTrackingError, ValueError) as e:
        logger.debug("Tool call failed", exc_info=True)
        print(f"{Colors.RED}Tool error: {e}{Colors.RESET}", file=sys.stderr)
        return 1

    print_formatted_tool_result(args.tool, result)
    return 0
