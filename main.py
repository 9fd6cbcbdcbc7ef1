from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv

from app_controller import AppController
from app_settings import load_settings
from config.data_dirs import ensure_data_dirs
from errors import AudioLaudoError
from project_version import __version__
from storage.kv import JsonFileStore

LOG_LEVEL_ENV = "AUDIOLAUDO_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _parse_args(argv: list[str]) -> tuple[argparse.Namespace, list[str]]:
    parser = argparse.ArgumentParser(description="BTX AudioLaudo - tonal audiometry report")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--patient", help="Patient name for the report")
    parser.add_argument("--date", help="Exam date (YYYY-MM-DD)")
    parser.add_argument("--data-dir", dest="data_dir", help="Application data directory")
    parser.add_argument("--log-level", dest="log_level", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument(
        "--export-report",
        dest="export_report",
        nargs="?",
        const="",
        metavar="PATH",
        help="Write the report PDF and exit (default name in the export folder)",
    )
    parser.add_argument(
        "--export-agenda",
        dest="export_agenda",
        metavar="DATE",
        help="Write the agenda PDF for DATE (YYYY-MM-DD) and exit",
    )
    parser.add_argument("--out", help="Output path for --export-agenda")
    return parser.parse_known_args(argv)


def _configure_logging(level_name: str, log_file: os.PathLike[str] | str) -> None:
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    try:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    except OSError:
        pass
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def _run_headless(controller: AppController, args: argparse.Namespace) -> int:
    logger = logging.getLogger("audiolaudo")
    try:
        if args.export_report is not None:
            path = controller.export_report(args.export_report or None)
            print(path)
        if args.export_agenda:
            path = controller.export_agenda(args.export_agenda, args.out)
            print(path)
    except (AudioLaudoError, OSError) as exc:
        logger.error("Export failed: %s", exc)
        return 1
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args_list = sys.argv if argv is None else argv
    args, passthrough = _parse_args(args_list[1:])

    load_dotenv()
    dirs = ensure_data_dirs(args.data_dir)
    settings = load_settings(dirs.root)
    level = args.log_level or os.environ.get(LOG_LEVEL_ENV) or settings.get("log_level", "INFO")
    _configure_logging(level, dirs.log_file)
    logging.getLogger("audiolaudo").info("BTX AudioLaudo %s, data in %s", __version__, dirs.root)

    controller = AppController(
        JsonFileStore(dirs.records),
        settings=settings,
        export_dir=settings.get("export_dir") or dirs.export,
    )
    controller.load()
    if args.patient is not None:
        controller.set_patient(args.patient)
    if args.date:
        controller.set_date(args.date)

    if args.export_report is not None or args.export_agenda:
        return _run_headless(controller, args)

    from PySide6.QtWidgets import QApplication
    from ui.main_window import MainWindow

    app = QApplication([args_list[0], *passthrough])
    win = MainWindow(controller)
    win.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
