"""Code generation for page-resources."""

from thicket.codegen.generator import CodeGenerator, GeneratedUnit, ShellRoute
from thicket.codegen.naming import const_name, escape_path, func_name, output_name

__all__ = [
    "CodeGenerator",
    "GeneratedUnit",
    "ShellRoute",
    "const_name",
    "escape_path",
    "func_name",
    "output_name",
]
