from src.cli import cli

cli(prog_name="contacts")
