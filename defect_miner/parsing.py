"""
Callable declarations and their static metrics, per source language.
"""

import ast
from pathlib import PurePosixPath

import javalang

from .models import Declaration, FailureReason, Outcome

# Nodes that add a path through a method
JAVA_DECISION_NODES = (
    javalang.tree.IfStatement,
    javalang.tree.ForStatement,
    javalang.tree.WhileStatement,
    javalang.tree.DoStatement,
    javalang.tree.SwitchStatementCase,
    javalang.tree.CatchClause,
    javalang.tree.TernaryExpression,
)

PYTHON_DECISION_NODES = (
    ast.If,
    ast.For,
    ast.AsyncFor,
    ast.While,
    ast.ExceptHandler,
    ast.IfExp,
    ast.match_case,
)


def parse_declarations(path: str, content: str | None) -> Outcome:
    """Parse one file's content into an Outcome holding its Declarations"""
    if not content or not content.strip():
        return Outcome.failure(FailureReason.EMPTY_CONTENT, path)

    suffix = PurePosixPath(path).suffix
    parser = _PARSERS.get(suffix)
    if parser is None:
        return Outcome.failure(FailureReason.UNSUPPORTED_LANGUAGE, suffix)

    try:
        return Outcome.success(parser(path, content))
    except Exception as e:
        return Outcome.failure(FailureReason.PARSE_ERROR, f"{type(e).__name__}: {e}")


# =============================================================================
# JAVA
# =============================================================================

def _render_type_argument(arg) -> str:
    if arg.type is None:
        return '?'
    rendered = _render_java_type(arg.type)
    if arg.pattern_type in ('extends', 'super'):
        return f"? {arg.pattern_type} {rendered}"
    return rendered


def _render_java_type(t) -> str:
    name = t.name
    arguments = getattr(t, 'arguments', None)
    if arguments:
        name += '<' + ', '.join(_render_type_argument(a) for a in arguments) + '>'
    sub_type = getattr(t, 'sub_type', None)
    if sub_type is not None:
        name += '.' + _render_java_type(sub_type)
    return name + '[]' * len(t.dimensions or [])


def java_signature(node) -> str:
    """name(Type, ...) with varargs shown as arrays"""
    params = []
    for p in node.parameters:
        rendered = _render_java_type(p.type)
        if p.varargs:
            rendered += '[]'
        params.append(rendered)
    return f"{node.name}({', '.join(params)})"


def _java_end_line(tokens, start, name: str) -> int:
    """Line of the brace closing the body of the callable named `name` at `start`"""
    seen_name = False
    params_closed = False
    parens = 0
    depth = 0
    for token in tokens:
        if token.position is None or (token.position.line, token.position.column) < start:
            continue
        # skip annotation arguments, which may hold braces
        if not seen_name:
            seen_name = isinstance(token, javalang.tokenizer.Identifier) and token.value == name
            continue
        if not isinstance(token, javalang.tokenizer.Separator):
            continue
        # parameter annotations may hold braces too
        if not params_closed:
            if token.value == '(':
                parens += 1
            elif token.value == ')':
                parens -= 1
                params_closed = parens == 0
            continue
        if token.value == '{':
            depth += 1
        elif token.value == '}':
            depth -= 1
            if depth == 0:
                return token.position.line
        elif token.value == ';' and depth == 0:
            # abstract or interface method
            return token.position.line
    return start[0]


def _java_complexity(node) -> int:
    return 1 + sum(1 for _, child in node if isinstance(child, JAVA_DECISION_NODES))


def parse_java(path: str, content: str) -> list[Declaration]:
    tokens = list(javalang.tokenizer.tokenize(content))
    tree = javalang.parse.parse(content)

    declarations = []
    for _, node in tree:
        if not isinstance(node, (javalang.tree.MethodDeclaration, javalang.tree.ConstructorDeclaration)):
            continue
        if node.position is None:
            continue
        start = (node.position.line, node.position.column)
        declarations.append(Declaration(
            path=path,
            signature=java_signature(node),
            start_line=start[0],
            end_line=_java_end_line(tokens, start, node.name),
            parameter_count=len(node.parameters),
            complexity=_java_complexity(node),
        ))
    return declarations


# =============================================================================
# PYTHON
# =============================================================================

def _python_parameters(args: ast.arguments) -> list[str]:
    names = [a.arg for a in args.posonlyargs + args.args]
    if args.vararg:
        names.append('*' + args.vararg.arg)
    names.extend(a.arg for a in args.kwonlyargs)
    if args.kwarg:
        names.append('**' + args.kwarg.arg)
    return names


def _python_complexity(node) -> int:
    return 1 + sum(1 for child in ast.walk(node) if isinstance(child, PYTHON_DECISION_NODES))


def _collect_python(node, path: str, scope: list[str], out: list[Declaration]):
    for child in ast.iter_child_nodes(node):
        if isinstance(child, ast.ClassDef):
            _collect_python(child, path, scope + [child.name], out)
        elif isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef)):
            params = _python_parameters(child.args)
            qualname = '.'.join(scope + [child.name])
            start = min([child.lineno] + [d.lineno for d in child.decorator_list])
            out.append(Declaration(
                path=path,
                signature=f"{qualname}({', '.join(params)})",
                start_line=start,
                end_line=child.end_lineno,
                parameter_count=len(params),
                complexity=_python_complexity(child),
            ))
            _collect_python(child, path, scope + [child.name], out)
        else:
            _collect_python(child, path, scope, out)


def parse_python(path: str, content: str) -> list[Declaration]:
    tree = ast.parse(content)
    declarations = []
    _collect_python(tree, path, [], declarations)
    return declarations


_PARSERS = {
    '.java': parse_java,
    '.py': parse_python,
}
