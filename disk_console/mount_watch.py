import asyncio
import logging

logger = logging.getLogger(__name__)


async def watch(shell, interval=3.0, rounds=None, report=print):
    """Poll the engine's mount status and report every change."""
    last = None
    done = 0
    while rounds is None or done < rounds:
        mounted, message = await shell.gate.check_mount()
        if mounted != last:
            report(f"Mounted: {mounted} {message}".rstrip())
            last = mounted
        done += 1
        if rounds is None or done < rounds:
            await asyncio.sleep(interval)
    return last
