from testtrace.cli.main import cli

cli(obj={})
