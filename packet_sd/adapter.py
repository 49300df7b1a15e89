import json
import logging
import os
import queue
import tempfile

logger = logging.getLogger(__name__)

POLL_SECONDS = 0.5


class Adapter:
    """Keeps a file_sd JSON file in sync with the batches from a discoverer."""

    def __init__(self, output, channel, name="packetSD"):
        self.output = output
        self.channel = channel
        self.name = name
        self.sources = {}
        self.groups = None

    def apply(self, batch):
        """Overlay one batch on the known groups; empty groups remove a source."""
        for tg in batch:
            if tg.get("targets"):
                self.sources[tg["source"]] = tg
            else:
                self.sources.pop(tg["source"], None)

    def render(self):
        groups = []
        for source in sorted(self.sources):
            tg = self.sources[source]
            groups.append({
                "targets": sorted(t["__address__"] for t in tg["targets"]),
                "labels": dict(tg.get("labels") or {}),
            })
        return groups

    def refresh(self, batch):
        self.apply(batch)
        groups = self.render()
        if groups == self.groups:
            return False
        self.write(groups)
        self.groups = groups
        return True

    def write(self, groups):
        """Replace the output file atomically so readers never see a partial file."""
        directory = os.path.dirname(os.path.abspath(self.output))
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix="sd-adapter")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(groups, f, indent=4)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self.output)
        except BaseException:
            os.unlink(tmp_path)
            raise
        logger.debug("%s wrote %d groups to %s", self.name, len(groups), self.output)

    def run(self, stop):
        while not stop.is_set():
            try:
                batch = self.channel.get(timeout=POLL_SECONDS)
            except queue.Empty:
                continue
            try:
                self.refresh(batch)
            except OSError as e:
                # groups stay stale, so the next batch retries the write
                logger.error("%s failed to write %s err=%s", self.name, self.output, e)
        logger.info("%s adapter stopped", self.name)
