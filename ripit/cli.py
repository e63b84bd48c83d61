"""Command-line interface for ripit."""

import argparse
import logging
import sys
from pathlib import Path

from ripit import __version__
from ripit.audio.audio_utils import check_ffmpeg
from ripit.models import RipConfig, RipStatus, SplitConfig, default_base_dir


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="ripit",
        description=(
            "Scarica l'audio di un video e lo divide in tracce usando capitoli, "
            "timestamp nella descrizione o rilevamento dei silenzi (in quest'ordine). "
            "Le playlist vengono scaricate come file separati senza divisione."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument(
        "url",
        help="URL o id del video/playlist",
    )
    parser.add_argument(
        "-o", "--output-dir",
        default=None,
        help="Directory di output (default: $YT_DOWNLOAD_DIR o ~/music/YTdownloads)",
    )
    parser.add_argument(
        "-d", "--silence-db",
        type=int,
        default=-30,
        help="Soglia per il rilevamento dei silenzi in dB (default: -30)",
    )
    parser.add_argument(
        "-s", "--silence-duration",
        type=_non_negative_float,
        default=2.0,
        help="Durata minima del silenzio in secondi (default: 2)",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=None,
        help="Timeout in secondi per ogni chiamata a ffmpeg e per la rete (default: nessuno)",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=30,
        help="Tentativi di download di yt-dlp (default: 30)",
    )
    parser.add_argument(
        "--cleanup-partial",
        action="store_true",
        help="Rimuovi le tracce già create se la divisione fallisce",
    )
    _add_logging_args(parser)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.log_file)

    check_ffmpeg()

    config = RipConfig(
        base_dir=Path(args.output_dir).expanduser() if args.output_dir else default_base_dir(),
        split=SplitConfig(
            silence_db=args.silence_db,
            silence_duration=args.silence_duration,
            timeout=args.timeout,
            cleanup_partial=args.cleanup_partial,
        ),
        retries=args.retries,
    )
    logging.info("Directory di output: %s", config.base_dir)
    logging.info("Soglia silenzi: %sdB, durata minima: %ss",
                 config.split.silence_db, config.split.silence_duration)

    from ripit.progress import ProgressReporter
    from ripit.ripper import Ripper

    try:
        with ProgressReporter() as progress:
            result = Ripper(config).rip(args.url, on_progress=progress)
    except KeyboardInterrupt:
        print("\n\nOperazione interrotta.")
        sys.exit(1)
    except Exception as e:
        logging.error("Errore: %s", e)
        if args.verbose:
            logging.exception("Dettagli:")
        sys.exit(1)

    if result.status is RipStatus.SUCCESS:
        print(f"\nCompletato: {result.message}")
    elif result.status is RipStatus.PARTIAL:
        print(f"\nCompletato con errori: {result.message}")
        sys.exit(1)
    else:
        print(f"\nErrore fatale, nessun file prodotto: {result.message}")
        sys.exit(1)


def collection_main(argv: list[str] | None = None) -> None:
    from ripit.collection import DEFAULT_INDEX_FILE, add_url, update_collection

    parser = argparse.ArgumentParser(
        prog="ripit-collection",
        description="Aggiorna la libreria con i nuovi video dei canali/playlist nell'indice",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--add",
        metavar="URL",
        default=None,
        help="Aggiungi l'URL di un canale/playlist all'indice ed esci",
    )
    parser.add_argument(
        "-i", "--index-file",
        default=str(DEFAULT_INDEX_FILE),
        help=f"File indice degli URL (default: {DEFAULT_INDEX_FILE})",
    )
    parser.add_argument(
        "-o", "--output-dir",
        default=None,
        help="Directory della libreria (default: $YT_DOWNLOAD_DIR o ~/music/YTdownloads)",
    )
    _add_logging_args(parser)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.log_file)

    index_path = Path(args.index_file).expanduser()
    if args.add:
        add_url(index_path, args.add)
        sys.exit(0)

    check_ffmpeg()

    from ripit.download import MediaClient
    from ripit.ripper import Ripper

    config = RipConfig(
        base_dir=Path(args.output_dir).expanduser() if args.output_dir else default_base_dir(),
    )
    ripper = Ripper(config)

    try:
        update_collection(index_path, config.base_dir, MediaClient(), ripper.rip)
    except KeyboardInterrupt:
        print("\n\nAggiornamento interrotto.")
        sys.exit(1)
    except ValueError as e:
        logging.error("%s", e)
        sys.exit(1)


def _add_logging_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-l", "--log-file",
        default=None,
        help="File di log (in aggiunta se esiste)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Abilita log dettagliati",
    )


def _configure_logging(verbose: bool, log_file: str | None) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("[%(asctime)s] [%(levelname)s] %(name)s: %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=handlers,
    )


def _non_negative_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"non è un numero: '{value}'")
    if number < 0:
        raise argparse.ArgumentTypeError(f"deve essere >= 0: '{value}'")
    return number


def _positive_float(value: str) -> float:
    number = _non_negative_float(value)
    if number == 0:
        raise argparse.ArgumentTypeError(f"deve essere > 0: '{value}'")
    return number


if __name__ == "__main__":
    main()
