"""Schema model, parser and configuration shared by the LSP and CLI layers."""
