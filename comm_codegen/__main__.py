"""Run the comm code generator with ``python -m comm_codegen``."""

from .main import main

if __name__ == "__main__":
    main()
