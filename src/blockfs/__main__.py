"""Entry point: ``python -m blockfs`` starts the REPL, ``python -m blockfs demo`` runs the demo."""

import sys

from blockfs import demo, repl

if __name__ == "__main__":
    if sys.argv[1:] == ["demo"]:
        demo.main()
    else:
        repl.run()
