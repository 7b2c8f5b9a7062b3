from pathlib import Path


def make_tree(root: Path, spec: dict) -> Path:
    """
    Build files and directories from a nested dict.

    Keys are names; dict values are subdirectories, string values are file
    contents.
    """
    root.mkdir(parents=True, exist_ok=True)
    for name, value in spec.items():
        path = root / name
        if isinstance(value, dict):
            make_tree(path, value)
        else:
            path.write_text(value)
    return root
