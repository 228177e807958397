import inspect
from typing import Any, Callable, Dict, List, Optional, Type
from functools import wraps
from pydantic import BaseModel, ValidationError

from tracking.errors import InvalidInputError


class Tool:
    """Represents an operation with parameter validation"""

    def __init__(self, name: str, function: Callable, parameter_model: Type[BaseModel], description: Optional[str] = None):
        """
        Initialize a new tool

        Args:
            name: The tool name
            function: The function to execute
            parameter_model: Pydantic model for parameter validation
            description: Optional description of the tool
        """
        self.name = name
        self.function = function
        self.parameter_model = parameter_model
        self.description = description or function.__doc__ or ""

        # Validate that function signature matches parameter model
        self._validate_function_signature()

    @classmethod
    def from_function(cls, function: Callable, description: Optional[str] = None) -> "Tool":
        """Build a tool from a function decorated with @tool, named after the function"""
        if not getattr(function, "is_tool", False):
            raise ValueError(f"Function '{function.__name__}' is not decorated with @tool")
        return cls(function.__name__, function, function.tool_parameter_model, description)

    def _validate_function_signature(self):
        """Ensure the function signature matches the parameter model fields"""
        sig = inspect.signature(self.function)
        func_params = set(sig.parameters.keys())
        model_fields = set(self.parameter_model.model_fields.keys())

        if func_params != model_fields:
            missing = model_fields - func_params
            extra = func_params - model_fields
            error_msg = []

            if missing:
                error_msg.append(f"Missing parameters in function: {missing}")
            if extra:
                error_msg.append(f"Extra parameters in function: {extra}")

            raise ValueError(f"Function signature does not match parameter model: {', '.join(error_msg)}")

    def get_description(self) -> Dict[str, Any]:
        """Name, description and parameter schema of the tool"""
        schema = self.parameter_model.model_json_schema()
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                name: prop.get("description", "")
                for name, prop in schema.get("properties", {}).items()
            },
            "required": schema.get("required", [])
        }

    def execute(self, **kwargs):
        """Validate and execute the function"""
        try:
            validated_params = self.parameter_model(**kwargs)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid parameters for '{self.name}': {e}") from e
        return self.function(**dict(validated_params))


class ToolSet:
    """Collection of related tools"""

    def __init__(self, tools: List[Tool]):
        """
        Initialize a set of tools

        Args:
            tools: List of Tool objects
        """
        self.tools = tools
        self._tool_dict = {tool.name: tool for tool in tools}

    def get_descriptions(self) -> List[Dict]:
        """Get descriptions for all tools"""
        return [tool.get_description() for tool in self.tools]

    def get_tool_by_name(self, name: str) -> Optional[Tool]:
        """Get a tool by name"""
        return self._tool_dict.get(name)


def tool(parameter_model: Type[BaseModel]):
    """
    Decorator for creating tools

    Args:
        parameter_model: Pydantic model for parameter validation

    Returns:
        Decorated function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            return func(*args, **kwargs)

        # Attach metadata for tool creation
        wrapper.tool_parameter_model = parameter_model
        wrapper.is_tool = True
        return wrapper
    return decorator
