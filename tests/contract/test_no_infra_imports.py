import ast
import pathlib


def _imports(py: pathlib.Path):
    tree = ast.parse(py.read_text(encoding="utf-8"))
    for node in ast.walk(tree):
        if isinstance(node, ast.ImportFrom) and node.module:
            yield node.module
        if isinstance(node, ast.Import):
            for n in node.names:
                yield n.name


def test_no_infrastructure_imports_in_api():
    root = pathlib.Path("src")
    for api_py in root.glob("**/api/**/*.py"):
        for module in _imports(api_py):
            if "infrastructure" in module:
                raise AssertionError(f"Infrastructure import in API file: {api_py} -> {module}")


def test_domain_does_not_depend_on_outer_layers():
    root = pathlib.Path("src")
    for domain_py in root.glob("**/domain/*.py"):
        for module in _imports(domain_py):
            for layer in (".application", ".infrastructure", ".api", "httpx", "smtplib"):
                if layer in module:
                    raise AssertionError(f"{domain_py} imports {module}")
