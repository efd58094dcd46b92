import asyncio
from datetime import datetime

from smart_laundry.enterprise.config.settings import AppSettings, StorageSettings, TimingSettings
from smart_laundry.services import build_runtime


async def main() -> None:
    settings = AppSettings(
        storage=StorageSettings(backend="memory"),
        timing=TimingSettings(poll_interval_s=1.0),
    )
    runtime = build_runtime(settings)
    last_tick_at: datetime | None = None
    done = asyncio.Event()

    def on_tick(snapshots) -> None:
        nonlocal last_tick_at
        now = datetime.utcnow()
        in_use = sum(1 for snapshot in snapshots if snapshot.status.is_in_use)
        if last_tick_at is None:
            print(f"first tick machines={len(snapshots)} in_use={in_use}")
        else:
            print(f"next tick after {(now - last_tick_at).total_seconds():.2f}s in_use={in_use}")
        last_tick_at = now
        if runtime.poller.ticks >= 5:
            done.set()

    runtime.poller.on_tick = on_tick
    runtime.engine.claim("washer1", 5)
    await runtime.poller.start()
    await done.wait()
    await runtime.poller.stop()
    runtime.close()


if __name__ == "__main__":
    asyncio.run(main())
