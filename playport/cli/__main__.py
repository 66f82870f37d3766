"""Module entry point for `python -m playport.cli`."""

if __name__ == "__main__":  # pragma: no cover (invocation driven)
    from playport.cli import cli

    cli()
