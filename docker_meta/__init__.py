from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("docker-meta")
except PackageNotFoundError:
    __version__ = "0.0.0"
