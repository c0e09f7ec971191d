"""File writer for exported records."""

from pathlib import Path

from loguru import logger


class FileWriter:
    """Write export files into an output directory.

    - Refuse paths that escape the output directory.
    - Do not rewrite files whose contents are unchanged, so re-running an
      export keeps mtimes of untouched records.
    - Keep counts of new / changed / same files for the final summary.
    """

    def __init__(self, output_dir: str | Path, dry_run: bool) -> None:
        self.output_dir = str(Path(output_dir).resolve())
        self.dry_run = dry_run

        if not dry_run and not Path(self.output_dir).is_dir():
            msg = f"Output directory {self.output_dir!r} not found"
            raise ValueError(msg)

        logger.debug("Writer ready, output_dir {!r}, dry_run {!r}", self.output_dir, dry_run)
        # Absolute paths written this run. Writing the same path twice is an error.
        self._files_made: set[str] = set()

        self._num_new = 0
        self._num_same = 0
        self._num_changed = 0
        self._finalized = False

    def is_possible_output(self, fname: str) -> bool:
        """Only JSON files are produced by an export."""
        return fname.endswith(".json")

    def _resolve(self, fname_rel: str) -> str:
        if Path(fname_rel).is_absolute():
            msg = f"must be relative: {fname_rel!r}"
            raise ValueError(msg)
        fname = str((Path(self.output_dir) / fname_rel).resolve())
        if not fname.startswith(self.output_dir + "/"):
            msg = f"Path escapes output dir: {fname!r}"
            raise ValueError(msg)
        return fname

    def make_data_file(self, fname_rel: str, *, contents: str) -> None:
        """Write contents to a file relative to the output directory.

        Args:
            fname_rel: Path relative to output directory.
            contents: Serialized record text.
        """
        fname = self._resolve(fname_rel)
        if not self.is_possible_output(fname):
            msg = f"Wanted to write {fname!r} but is_possible_output() returns False"
            raise ValueError(msg)
        if fname in self._files_made:
            msg = f"File written twice in one run: {fname!r}"
            raise ValueError(msg)
        self._files_made.add(fname)

        action = "create"
        try:
            with open(fname, encoding="utf-8") as f:
                if f.read() == contents:
                    self._num_same += 1
                    return
            action = "update"
        except (FileNotFoundError, UnicodeDecodeError):
            pass

        if action == "update":
            self._num_changed += 1
        else:
            self._num_new += 1

        if self.dry_run:
            logger.info("dry-run: would {} {!r}", action, fname)
        else:
            logger.debug("Writing ({}) {!r}", action, fname)
            Path(fname).parent.mkdir(parents=True, exist_ok=True)
            with open(fname, "w", encoding="utf-8") as f:
                f.write(contents)

    def finalize(self) -> None:
        """Log update statistics. May only be called once."""
        if self._finalized:
            msg = "finalize() called twice"
            raise RuntimeError(msg)
        self._finalized = True

        log_msg = (
            f"Outputs: {self._num_same} same, {self._num_changed} changed, "
            f"{self._num_new} new in {self.output_dir}"
        )
        if self._num_same == len(self._files_made):
            logger.debug(log_msg)
        else:
            logger.info(log_msg)
