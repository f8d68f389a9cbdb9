import sys
import runpy

# debugpy puts the real arguments after "--"
if "--" in sys.argv:
    args = sys.argv[sys.argv.index("--") + 1 :]
else:
    args = sys.argv[1:]

# give Typer a clean argv
sys.argv = ["pycodebase"] + args

# same as: python -m pycodebase ...
runpy.run_module("pycodebase", run_name="__main__")
