"""Runtime type shapes, with decoding of URL-encoded forms and YAML into struct-shaped types."""

__version__ = "0.1.2"

__all__ = ["containers", "shape", "urlencoded", "value", "yamlform"]