from pathlib import Path

# Extension -> language id, mirroring the ids editors report
EXTENSION_LANGUAGES = {
    ".ts": "typescript",
    ".js": "javascript",
    ".py": "python",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
}

SOURCE_EXTENSIONS = tuple(EXTENSION_LANGUAGES)


def detect_language(file_path: str) -> str:
    suffix = Path(file_path).suffix.lower()
    if suffix in EXTENSION_LANGUAGES:
        return EXTENSION_LANGUAGES[suffix]
    return suffix.lstrip(".") or "plaintext"
