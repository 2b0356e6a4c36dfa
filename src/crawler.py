import os
import logging
from logging.handlers import RotatingFileHandler
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor, wait
from threading import Event
import signal

from configs import LOG_BACKUP_COUNT, LOG_MAX_BYTES, MAX_URL_LENGTH
from download_utils import build_session, fetch_url
from errors import FetchError, WriteFailed
from io_helpers import ProgressWriter, render_artifact, save_binary
from job_queue import JobQueue
from limiter import RateLimiter
from url_utils import domain_of, normalize_url
from utils import artifact_path


# Shutdown event set by the signal handlers installed from main()
shutdown_event = Event()

_log_handlers = []


def _signal_handler(signum, frame):
    logging.warning("Received signal %s - finishing in-flight requests and stopping...", signum)
    shutdown_event.set()


def install_signal_handlers():
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)


def configure_logging(verbose=False, logfile=None):
    """
    Console diagnostics go to stderr at WARNING; job failures only reach it
    in verbose mode. The optional logfile also receives DEBUG bookkeeping.
    """
    root_logger = logging.getLogger()
    for h in _log_handlers:
        root_logger.removeHandler(h)
        h.close()
    _log_handlers.clear()

    root_logger.setLevel(logging.DEBUG if logfile else logging.WARNING)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    # console handler (stderr)
    ch = logging.StreamHandler()
    ch.setFormatter(formatter)
    ch.setLevel(logging.WARNING)
    root_logger.addHandler(ch)
    _log_handlers.append(ch)
    # file handler
    if logfile:
        fh = RotatingFileHandler(logfile, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8")
        fh.setFormatter(formatter)
        fh.setLevel(logging.DEBUG)
        root_logger.addHandler(fh)
        _log_handlers.append(fh)
    if verbose:
        logging.debug("Verbose diagnostics enabled")
    return root_logger


class FetchOutcome(namedtuple("FetchOutcome", ["url", "path", "status", "error"])):
    """What became of one job: an artifact path and status, or the error."""

    @property
    def ok(self):
        return self.error is None


def process_url(session, raw_url, limiter, config):
    url = raw_url
    try:
        url, parsed = normalize_url(raw_url)
        domain = domain_of(parsed)

        limiter.acquire(domain)
        result = fetch_url(session, url, config)

        path = artifact_path(config.output_dir, domain, url)
        try:
            save_binary(path, render_artifact(result))
        except OSError as exc:
            raise WriteFailed(url, str(exc)) from exc
    except FetchError as exc:
        return FetchOutcome(url, None, None, exc)
    return FetchOutcome(url, path, result.status, None)


def worker_loop(jobs, session, limiter, config, progress, stop_event):
    handled = 0
    while True:
        raw_url = jobs.get()
        if raw_url is None:
            return handled
        if stop_event.is_set():
            logging.debug("Shutdown requested: dropping queued job %s", raw_url)
            continue
        try:
            outcome = process_url(session, raw_url, limiter, config)
        except Exception:
            if config.verbose:
                logging.exception("Unexpected error processing %s", raw_url)
            else:
                logging.debug("Unexpected error processing %s", raw_url, exc_info=True)
            continue
        handled += 1
        if outcome.ok:
            try:
                progress.emit(outcome.path, outcome.status, outcome.url)
            except (OSError, ValueError) as exc:
                # closed or broken stdout; the artifact is already on disk
                if config.verbose:
                    logging.warning("Could not report %s: %s", outcome.url, exc)
        elif config.verbose:
            logging.warning("Error processing %s: %s", outcome.url, outcome.error)


def iter_jobs(lines, verbose=False):
    """Yield one job per usable input line; blank and over-long lines are skipped."""
    try:
        for line in lines:
            url = line.strip()
            if not url:
                continue
            if len(url.encode("utf-8")) > MAX_URL_LENGTH:
                if verbose:
                    logging.warning("URL too long, skipping: %s...", url[:50])
                continue
            yield url
    except (OSError, UnicodeDecodeError) as exc:
        logging.error("Error reading input: %s", exc)


def run_bulk_fetch(lines, config, out=None, session=None, stop_event=None):
    """
    Fetch every URL in `lines` and return the process exit code.
    1 only when the output directory cannot be created; failed jobs do not
    change the exit code.
    """
    try:
        os.makedirs(config.output_dir, exist_ok=True)
    except OSError as exc:
        logging.error("Failed to create output directory %s: %s", config.output_dir, exc)
        return 1

    own_session = session is None
    if own_session:
        session = build_session(config)
    stop_event = stop_event or Event()
    limiter = RateLimiter(config.delay)
    jobs = JobQueue(config.queue_size)
    progress = ProgressWriter(out)

    executor = ThreadPoolExecutor(max_workers=config.concurrency, thread_name_prefix="fetch-worker")
    futures = [
        executor.submit(worker_loop, jobs, session, limiter, config, progress, stop_event)
        for _ in range(config.concurrency)
    ]
    logging.debug("Started %d workers (queue size %d)", config.concurrency, config.queue_size)

    queued = 0
    try:
        for url in iter_jobs(lines, config.verbose):
            if stop_event.is_set():
                logging.debug("Shutdown requested: no longer reading input")
                break
            jobs.put(url)
            queued += 1
    finally:
        jobs.close()
        wait(futures)
        executor.shutdown(wait=True)
        if own_session:
            session.close()

    handled = sum(f.result() for f in futures)
    logging.debug("Workers finished: %d queued, %d handled, %d domains", queued, handled, len(limiter.domains()))
    return 0
