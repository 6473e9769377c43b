"""
Built-in command modules.

Each module lives in its own subdirectory with an __init__.py that declares
REGISTRAR_KIND and the matching register_*_commands(host) function. They are
loaded from their source path like any user module, so they hot reload too.
"""
