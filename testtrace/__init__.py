"""testtrace: turn `go test -json` event streams into tracing spans."""

__version__ = "0.1.0"
