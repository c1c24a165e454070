import logging
import ast
from typing import List, Optional, Sequence, Union

logger = logging.getLogger(__name__)

Expression = Union[str, ast.expr]


def add_location(node):
    """Add location info to AST nodes"""
    node.lineno = 1
    node.col_offset = 0
    return node


def create_docstring(content: str) -> ast.Expr:
    """Creates an AST node for a docstring."""
    docstring_node = ast.Expr(value=ast.Constant(value=content))
    docstring_node.lineno = 1
    docstring_node.col_offset = 0
    return docstring_node


def create_import(module: str, names: Optional[List[str]] = None) -> Union[ast.Import, ast.ImportFrom]:
    """Creates an AST node for an import statement."""
    if names:
        node = ast.ImportFrom(
            module=module,
            names=[ast.alias(name=name, lineno=1, col_offset=0) for name in names],
            level=0
        )
    else:
        node = ast.Import(names=[ast.alias(name=module, lineno=1, col_offset=0)])

    return add_location(node)


def create_name(identifier: str) -> ast.Name:
    """Creates an AST Name node in load context."""
    return add_location(ast.Name(id=identifier, ctx=ast.Load()))


def _as_expr(value: Expression) -> ast.expr:
    return create_name(value) if isinstance(value, str) else value


def parse_expression(source: str) -> ast.expr:
    """Parses a Python expression (typically a type annotation) into an AST node."""
    return ast.parse(source, mode="eval").body


def create_assign(target: Expression, value: ast.expr) -> ast.Assign:
    """Creates an AST node for an assignment to a name, attribute or subscript."""
    if isinstance(target, str):
        target_node = ast.Name(id=target, ctx=ast.Store(), lineno=1, col_offset=0)
    else:
        target_node = target
        target_node.ctx = ast.Store()
    return add_location(ast.Assign(targets=[target_node], value=value))


def create_attribute(obj: Expression, attr_name: str) -> ast.Attribute:
    """Creates an AST node for ``obj.attr_name``."""
    return add_location(ast.Attribute(value=_as_expr(obj), attr=attr_name, ctx=ast.Load()))


def create_subscript(obj: Expression, key: str) -> ast.Subscript:
    """Creates an AST node for ``obj['key']``."""
    return add_location(ast.Subscript(value=_as_expr(obj), slice=create_string_constant(key), ctx=ast.Load()))


def create_call(func_name: str, args: Optional[List[ast.expr]] = None, keywords: Optional[List[ast.keyword]] = None) -> ast.Call:
    """Creates an AST node for a function call."""
    return add_location(ast.Call(
        func=create_name(func_name),
        args=args or [],
        keywords=keywords or []
    ))


def create_attribute_call(obj: Expression, attr_name: str, args: Optional[List[ast.expr]] = None, keywords: Optional[List[ast.keyword]] = None) -> ast.Call:
    """Creates an AST node for a method call on an object."""
    return add_location(ast.Call(
        func=create_attribute(obj, attr_name),
        args=args or [],
        keywords=keywords or []
    ))


def create_self_call(method_name: str, args: Optional[List[ast.expr]] = None) -> ast.Call:
    """Creates an AST node for ``self.method_name(*args)``."""
    return create_attribute_call("self", method_name, args)


def create_super_call(method_name: str, args: Optional[List[ast.expr]] = None) -> ast.Call:
    """Creates an AST node for ``super().method_name(*args)``."""
    return create_attribute_call(create_call("super"), method_name, args)


def create_expr(value: ast.expr) -> ast.Expr:
    """Wraps an expression into a statement."""
    return add_location(ast.Expr(value=value))


def create_return(value: Optional[ast.expr]) -> ast.Return:
    return add_location(ast.Return(value=value))


def create_if(test: ast.expr, body: List[ast.stmt], orelse: Optional[List[ast.stmt]] = None) -> ast.If:
    return add_location(ast.If(test=test, body=body, orelse=orelse or []))


def create_if_expression(test: ast.expr, body: ast.expr, orelse: ast.expr) -> ast.IfExp:
    """Creates an AST node for ``body if test else orelse``."""
    return add_location(ast.IfExp(test=test, body=body, orelse=orelse))


def create_is_none(value: Expression, negate: bool = False) -> ast.Compare:
    """Creates an AST node for ``value is None`` (or ``is not None``)."""
    operator = ast.IsNot() if negate else ast.Is()
    return add_location(ast.Compare(left=_as_expr(value), ops=[operator], comparators=[create_none_constant()]))


def create_not(value: Expression) -> ast.UnaryOp:
    return add_location(ast.UnaryOp(op=ast.Not(), operand=_as_expr(value)))


def create_dict(keys: Sequence[str], values: Sequence[ast.expr]) -> ast.Dict:
    """Creates an AST Dict node with string keys."""
    return add_location(ast.Dict(
        keys=[create_string_constant(key) for key in keys],
        values=list(values)
    ))


def create_list(elements: Sequence[ast.expr]) -> ast.List:
    return add_location(ast.List(elts=list(elements), ctx=ast.Load()))


def create_list_of_strings(items: List[str]) -> ast.List:
    """Creates an AST List node containing string constants."""
    return create_list([create_string_constant(item) for item in items])


def create_list_comprehension(element: ast.expr, target: str, iterable: ast.expr) -> ast.ListComp:
    """Creates an AST node for ``[element for target in iterable]``."""
    generator = ast.comprehension(
        target=ast.Name(id=target, ctx=ast.Store(), lineno=1, col_offset=0),
        iter=iterable,
        ifs=[],
        is_async=0
    )
    return add_location(ast.ListComp(elt=element, generators=[generator]))


def create_string_constant(value: str, escape_newlines: bool = False) -> ast.Constant:
    """Creates an AST Constant node for a string."""
    if escape_newlines:
        value = value.replace("\n", "\\n")
    return add_location(ast.Constant(value=value))


def create_constant(value) -> ast.Constant:
    """Creates an AST Constant node for a literal (str, int, float, bool or None)."""
    return add_location(ast.Constant(value=value))


def create_none_constant() -> ast.Constant:
    """Creates an AST Constant node for None."""
    return create_constant(None)


def create_arg(name: str, annotation: Optional[str] = None) -> ast.arg:
    """Creates a function argument, with an optional annotation given as source."""
    return add_location(ast.arg(
        arg=name,
        annotation=parse_expression(annotation) if annotation else None
    ))


def create_function_def(
    name: str,
    args: Optional[List[ast.arg]] = None,
    body: Optional[List[ast.stmt]] = None,
    returns: Optional[str] = None,
    defaults: Optional[List[ast.expr]] = None,
    docstring: Optional[str] = None,
    is_method: bool = True,
) -> ast.FunctionDef:
    """
    Creates an AST node for a function (by default a method taking ``self``).

    ``defaults`` apply to the last arguments, as in a Python signature.
    """
    all_args = ([create_arg("self")] if is_method else []) + list(args or [])
    statements = ([create_docstring(docstring)] if docstring else []) + list(body or [])
    if not statements:
        statements = [add_location(ast.Pass())]

    node = ast.FunctionDef(
        name=name,
        args=ast.arguments(
            posonlyargs=[],
            args=all_args,
            vararg=None,
            kwonlyargs=[],
            kw_defaults=[],
            kwarg=None,
            defaults=list(defaults or []),
        ),
        body=statements,
        decorator_list=[],
        returns=parse_expression(returns) if returns else None,
        type_params=[],
    )
    return add_location(node)


def create_class_def(name: str, bases: List[str], body: List[ast.stmt], decorator_list: Optional[List[ast.expr]] = None) -> ast.ClassDef:
    """Creates an AST node for a class definition."""
    node = ast.ClassDef(
        name=name,
        bases=[create_name(base) for base in bases],
        keywords=[],
        body=body or [add_location(ast.Pass())],
        decorator_list=decorator_list or [],
        type_params=[],
    )
    return add_location(node)


def create_module(body: List[ast.stmt]) -> ast.Module:
    """Creates a module node and fills in missing location info."""
    module = ast.Module(body=body, type_ignores=[])
    return ast.fix_missing_locations(module)


def unparse_module(module: ast.Module) -> str:
    """Turns a module node into source code."""
    return ast.unparse(module) + "\n"
