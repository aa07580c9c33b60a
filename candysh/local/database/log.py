import time
import sqlite3
import logging
import threading
from pathlib import Path
from collections import namedtuple
from contextlib import contextmanager
from typing import List, Dict, Any, Iterator

LogEntry = namedtuple('LogEntry', ['timestamp', 'level', 'module', 'message'])
log = logging.getLogger(__name__)

_INSERT_SQL = '''INSERT INTO logs (timestamp, level, module, funcName, lineno, message)
                 VALUES (:timestamp, :level, :module, :funcName, :lineno, :message)'''


class LogDBManager:
    """
    Reads and writes the interpreter's log records in a single SQLite table.

    Writers (the SQLite log handler's flush thread) and readers (the 'logs'
    command) share one lock per manager; the database runs in WAL mode so a
    second manager on the same file can read while a batch is written.
    """

    def __init__(self, db_path: Path):
        """
        :param db_path: The path to the logging SQLite database file.
        """
        self.db_path = db_path
        self._lock = threading.Lock()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            conn = sqlite3.connect(self.db_path, timeout=10)
            conn.row_factory = sqlite3.Row
            try:
                conn.execute("PRAGMA journal_mode=WAL;")
                yield conn
                conn.commit()
            finally:
                conn.close()

    def initialize_database(self) -> None:
        """
        Ensures the log table exists in the database.
        """
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with self._connect() as conn:
                conn.execute('''
                    CREATE TABLE IF NOT EXISTS logs (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        timestamp REAL,
                        level TEXT,
                        module TEXT,
                        funcName TEXT,
                        lineno INTEGER,
                        message TEXT
                    )
                ''')
            log.debug("Log database tables created/verified.")
        except sqlite3.Error as e:
            log.critical(f"Could not create log database tables: {e}", exc_info=True)
            raise

    def insert_log_batch(self, log_entries: List[Dict[str, Any]]) -> None:
        """
        Inserts multiple log entries in a single transaction.

        :param log_entries: Dicts with the keys timestamp, level, module, funcName, lineno and message.
        """
        if not log_entries:
            return
        with self._connect() as conn:
            conn.executemany(_INSERT_SQL, log_entries)

    def fetch_last_entries(self, limit: int) -> List[LogEntry]:
        """
        Fetches the most recent N log entries from the database.

        :param limit: The maximum number of log entries to retrieve.
        :return list: A list of LogEntry namedtuples, oldest first.
        """
        entries = []
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT timestamp, level, module, message FROM logs ORDER BY id DESC LIMIT ?",
                    (limit,)
                ).fetchall()
        except sqlite3.Error as e:
            log.error(f"Failed to fetch log entries from database: {e}")
            return entries

        for row in reversed(rows):
            dt = time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(row['timestamp']))
            entries.append(LogEntry(
                timestamp=row['timestamp'], level=row['level'], module=row['module'],
                message=f"{dt} - {row['level']:<8} - [{row['module']}] - {row['message']}"
            ))
        return entries
