# DayFlow/cli.py

import argparse
import asyncio
import logging
import sys
import time
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
load_dotenv()

from DayFlow.config import Settings
from DayFlow.database import init_database
from DayFlow.errors import DayFlowError
from DayFlow.models import ICON_NAMES, day_key, parse_day_key, resolve_icon
from DayFlow.narrative.flows import NarrativeService
from DayFlow.summary.csv_export import growth_narratives, write_csv_report
from DayFlow.summary.report import priority_label, resolve_category_name
from DayFlow.tracker import DayTracker, today

logging.basicConfig(
    format="%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s",
    level=logging.INFO,
)
for noisy in ("apscheduler", "httpx", "google_genai"):
    logging.getLogger(noisy).setLevel(logging.WARNING)
log = logging.getLogger("DayFlow.cli")

_tracker: Optional[DayTracker] = None


def _get_tracker(settings: Settings) -> DayTracker:
    global _tracker
    if _tracker is None:
        _tracker = DayTracker(settings)
    return _tracker


def _close_tracker() -> None:
    global _tracker
    if _tracker is not None:
        _tracker.close()
        _tracker = None


def _add_day_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--day", type=parse_day_key, default=None, help="Day YYYY-MM-DD (default: today).")
    parser.add_argument("--days-ago", type=int, default=None, help="Days ago (overrides --day).")


def _target_day(args_ns, settings: Settings) -> str:
    if args_ns.days_ago is not None:
        return day_key(today(settings) - timedelta(days=args_ns.days_ago))
    return day_key(args_ns.day or today(settings))


def _print_day(tracker: DayTracker, key: str) -> None:
    categories = tracker.categories.list_categories()
    print(f"Activities for {key}")
    print(f"{'Hour':<6} {'Category':<16} {'Priority':<9} Description")
    for record in tracker.activities.get_day(key):
        print(
            f"{record.hour:02d}:00  "
            f"{resolve_category_name(record.category_id, categories):<16} "
            f"{priority_label(record.priority):<9} "
            f"{record.description}"
        )
        for index, note in enumerate(record.notes_15min):
            if note:
                print(f"   :{index * 15:02d}  {note}")


def main():
    settings = Settings()

    parser = argparse.ArgumentParser(
        prog="dayflow",
        description="DayFlow: hour-by-hour activity tracking, stats and reports"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging for all DayFlow modules."
    )
    subparsers = parser.add_subparsers(dest="command", title="Available Commands", required=True)

    # --- Database Init Subcommand ---
    parser_dbinit = subparsers.add_parser("init-db", help="Create the DuckDB storage file and tables.")
    def handle_init_db(args_ns, current_settings: Settings):
        init_database(current_settings.db_path)
        log.info(f"DuckDB storage initialized at {current_settings.db_path}.")
    parser_dbinit.set_defaults(func=handle_init_db)

    # --- Categories Subcommand ---
    parser_categories = subparsers.add_parser("categories", help="List, add or delete categories.")
    category_subparsers = parser_categories.add_subparsers(dest="action", title="Category Actions", required=True)

    parser_cat_list = category_subparsers.add_parser("list", help="Show categories in order.")
    def handle_categories_list(args_ns, current_settings: Settings):
        tracker = _get_tracker(current_settings)
        for category in tracker.categories.list_categories():
            print(f"{category.id:<16} {category.name:<20} {resolve_icon(category.icon)}")
    parser_cat_list.set_defaults(func=handle_categories_list)

    parser_cat_add = category_subparsers.add_parser("add", help="Add a category.")
    parser_cat_add.add_argument("name", help="Category name (case-insensitively unique).")
    parser_cat_add.add_argument("--icon", default=None, help=f"Icon name, one of: {', '.join(ICON_NAMES)}.")
    def handle_categories_add(args_ns, current_settings: Settings):
        tracker = _get_tracker(current_settings)
        category = tracker.categories.add_category(args_ns.name, args_ns.icon)
        print(f"Category \"{category.name}\" added (id {category.id}).")
    parser_cat_add.set_defaults(func=handle_categories_add)

    parser_cat_delete = category_subparsers.add_parser("delete", help="Delete a category and clear its uses in every day.")
    parser_cat_delete.add_argument("category_id", help="Category id (see 'categories list').")
    def handle_categories_delete(args_ns, current_settings: Settings):
        tracker = _get_tracker(current_settings)
        if tracker.categories.delete_category(args_ns.category_id):
            print(f"Category {args_ns.category_id} deleted.")
        else:
            print(f"No category with id {args_ns.category_id}; nothing to do.")
    parser_cat_delete.set_defaults(func=handle_categories_delete)

    # --- Day Subcommand ---
    parser_day = subparsers.add_parser("day", help="Show a day's hourly log.")
    _add_day_arguments(parser_day)
    def handle_day_show(args_ns, current_settings: Settings):
        _print_day(_get_tracker(current_settings), _target_day(args_ns, current_settings))
    parser_day.set_defaults(func=handle_day_show)

    # --- Log Subcommand ---
    parser_log = subparsers.add_parser("log", help="Edit an hour of a day.")
    log_subparsers = parser_log.add_subparsers(dest="action", title="Log Actions", required=True)

    parser_log_set = log_subparsers.add_parser("set", help="Set description, categoryId or priority of an hour.")
    _add_day_arguments(parser_log_set)
    parser_log_set.add_argument("--hour", type=int, required=True, help="Hour 0-23.")
    parser_log_set.add_argument("--field", required=True, choices=["description", "categoryId", "priority"])
    parser_log_set.add_argument("--value", default="", help="New value; empty clears categoryId / priority.")
    def handle_log_set(args_ns, current_settings: Settings):
        tracker = _get_tracker(current_settings)
        key = _target_day(args_ns, current_settings)
        tracker.activities.set_field(key, args_ns.hour, args_ns.field, args_ns.value)
        print(f"{key} {args_ns.hour:02d}:00 {args_ns.field} updated.")
    parser_log_set.set_defaults(func=handle_log_set)

    parser_log_note = log_subparsers.add_parser("note", help="Set a 15-minute note of an hour.")
    _add_day_arguments(parser_log_note)
    parser_log_note.add_argument("--hour", type=int, required=True, help="Hour 0-23.")
    parser_log_note.add_argument("--interval", type=int, required=True, help="0=:00, 1=:15, 2=:30, 3=:45.")
    parser_log_note.add_argument("--text", default="", help="Note text.")
    def handle_log_note(args_ns, current_settings: Settings):
        tracker = _get_tracker(current_settings)
        key = _target_day(args_ns, current_settings)
        tracker.activities.set_interval_note(key, args_ns.hour, args_ns.interval, args_ns.text)
        print(f"{key} {args_ns.hour:02d}:{args_ns.interval * 15:02d} note updated.")
    parser_log_note.set_defaults(func=handle_log_note)

    # --- Stats Subcommand ---
    parser_stats = subparsers.add_parser("stats", help="Hours per category for a day.")
    _add_day_arguments(parser_stats)
    def handle_stats(args_ns, current_settings: Settings):
        tracker = _get_tracker(current_settings)
        key = _target_day(args_ns, current_settings)
        category_times = tracker.category_times(key)
        if not category_times:
            print(f"No time allocated to categories on {key}.")
        for ct in category_times:
            print(f"{ct.name:<20} {ct.hours:>2}h")
    parser_stats.set_defaults(func=handle_stats)

    # --- Summarize Subcommand ---
    parser_summarize = subparsers.add_parser("summarize", help="Generate narrative reports with the LLM.")
    summary_subparsers = parser_summarize.add_subparsers(dest="summary_type", title="Summary Types", required=True)

    parser_summarize_daily = summary_subparsers.add_parser("daily", help="Summary report with the day's key tasks.")
    _add_day_arguments(parser_summarize_daily)
    def handle_summarize_daily(args_ns, current_settings: Settings):
        tracker = _get_tracker(current_settings)
        key = _target_day(args_ns, current_settings)
        service = NarrativeService(current_settings)
        log.info(f"CLI: Generating summary report for {key}...")
        report = asyncio.run(service.summarize(tracker.report_rows(key)))
        if service.last_notice:
            log.warning(service.last_notice)
        print(report.summary_report)
    parser_summarize_daily.set_defaults(func=handle_summarize_daily)

    parser_summarize_growth = summary_subparsers.add_parser("growth", help="Professional growth report and suggestions.")
    _add_day_arguments(parser_summarize_growth)
    def handle_summarize_growth(args_ns, current_settings: Settings):
        tracker = _get_tracker(current_settings)
        key = _target_day(args_ns, current_settings)
        service = NarrativeService(current_settings)
        log.info(f"CLI: Generating growth report for {key}...")
        report = asyncio.run(service.analyze_growth(tracker.report_rows(key)))
        if service.last_notice:
            log.warning(service.last_notice)
        print("Professional Growth Report:")
        print(report.professional_growth_report)
        print()
        print("Improvement Suggestions:")
        print(report.improvement_suggestions)
    parser_summarize_growth.set_defaults(func=handle_summarize_growth)

    # --- Suggest Subcommand ---
    parser_suggest = subparsers.add_parser("suggest", help="Suggest completions for an activity description.")
    parser_suggest.add_argument("text", help="What you have typed so far.")
    parser_suggest.add_argument("--hour", type=int, default=None, help="Hour 0-23 used as context.")
    def handle_suggest(args_ns, current_settings: Settings):
        service = NarrativeService(current_settings)
        for suggestion in asyncio.run(service.suggest_continuations(args_ns.text, args_ns.hour)):
            print(suggestion)
        if service.last_notice:
            log.warning(service.last_notice)
    parser_suggest.set_defaults(func=handle_suggest)

    # --- Export Subcommand ---
    parser_export = subparsers.add_parser("export", help="Export a day's report.")
    export_subparsers = parser_export.add_subparsers(dest="export_format", title="Export Formats", required=True)
    parser_export_csv = export_subparsers.add_parser("csv", help="CSV with all 24 hours, category totals and growth narrative.")
    _add_day_arguments(parser_export_csv)
    parser_export_csv.add_argument("--out", type=Path, default=None, help="Output directory (default: settings.export_dir).")
    parser_export_csv.add_argument("--no-narrative", action="store_true", help="Skip the LLM growth report sections.")
    def handle_export_csv(args_ns, current_settings: Settings):
        tracker = _get_tracker(current_settings)
        key = _target_day(args_ns, current_settings)
        narratives = []
        if not args_ns.no_narrative:
            service = NarrativeService(current_settings)
            report = asyncio.run(service.analyze_growth(tracker.report_rows(key)))
            if service.last_notice:
                log.warning(service.last_notice)
            narratives = growth_narratives(report)
        document = tracker.export_csv(key, narratives)
        path = write_csv_report(document, args_ns.out or current_settings.export_dir, key)
        print(f"Report written to {path}")
    parser_export_csv.set_defaults(func=handle_export_csv)

    # --- Remind Subcommand ---
    parser_remind = subparsers.add_parser("remind", help="Print a reminder at every quarter hour until interrupted.")
    def handle_remind(args_ns, current_settings: Settings):
        from DayFlow.reminders import ReminderScheduler

        def notify(hour: int, interval_index: int):
            print(f"Reminder: what are you doing at {hour:02d}:{interval_index * 15:02d}?", flush=True)

        reminders = ReminderScheduler(notify, lead_seconds=current_settings.reminder_lead_s)
        reminders.enable()
        try:
            while True:
                time.sleep(1)
        except (KeyboardInterrupt, SystemExit):
            log.info("Shutdown signal received.")
        finally:
            reminders.disable()
    parser_remind.set_defaults(func=handle_remind)

    # --- Serve Subcommand ---
    parser_serve = subparsers.add_parser("serve", help="Run the local HTTP API for the web client.")
    def handle_serve(args_ns, current_settings: Settings):
        import uvicorn
        log.info(f"Starting DayFlow API on {current_settings.api_host}:{current_settings.api_port}...")
        uvicorn.run("DayFlow.api.main:app", host=current_settings.api_host, port=current_settings.api_port, log_level="info")
    parser_serve.set_defaults(func=handle_serve)

    args = parser.parse_args()

    if args.debug:
        logging.getLogger("DayFlow").setLevel(logging.DEBUG)
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        for handler in root_logger.handlers:
            handler.setLevel(logging.DEBUG)
        log.debug("Debug logging enabled via CLI.")

    try:
        args.func(args, settings)
    except DayFlowError as e:
        log.error(f"{type(e).__name__}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        _close_tracker()


if __name__ == "__main__":
    main()
