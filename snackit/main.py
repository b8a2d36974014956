import asyncio
import logging
import signal

from dotenv import load_dotenv

from snackit.runtime.api_runner import run_api
from snackit.runtime.config import Settings


async def main() -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    settings = Settings.from_env()

    stop_event = asyncio.Event()

    def _handle_sig(*_):
        stop_event.set()

    loop = asyncio.get_running_loop()
    for s in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(s, _handle_sig)
        except NotImplementedError:
            # Signals not available (e.g., on Windows)
            pass

    await run_api(settings, stop_event)


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
