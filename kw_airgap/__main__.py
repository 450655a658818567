"""Run the kw-airgap command line tool with `python -m kw_airgap`."""

from kw_airgap.tool.airgap import main

if __name__ == "__main__":
    main()
