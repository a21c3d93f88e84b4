"""Entry point: delegates to CLI app (one module per mode: run, check, threads)."""

from rich.traceback import install

from topic_bridge.cli import app
from topic_bridge.utils.tracing import shutdown_tracing


def main() -> None:
    try:
        install(show_locals=False, max_frames=5, word_wrap=True)
        app()
    finally:
        shutdown_tracing()


if __name__ == "__main__":
    main()
