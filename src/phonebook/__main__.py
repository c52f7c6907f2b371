from phonebook.cli.commands import cli

if __name__ == "__main__":
    cli()
