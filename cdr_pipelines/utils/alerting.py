"""
Failure alerts for the extract loader.

An aborted run sends one plain-text email naming the extract file that
stopped it, the offending line or statement when known, and what happens
to the remaining files. Delivery problems are logged and never raised, so
an alert cannot mask the failure that triggered it.
"""

import logging
import os
import smtplib
import time
from datetime import datetime, timezone
from email.mime.text import MIMEText
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SUBJECT_PREFIX = "[CDR Loader]"

# Error text and statements are cut to this many characters in the body
_DETAIL_LIMIT = 1000


def get_alerting_config() -> Dict[str, Any]:
    """Get alerting configuration from environment variables."""
    return {
        "email_enabled": os.getenv("ALERT_EMAIL_ENABLED", "false").lower() == "true",
        "smtp_host": os.getenv("SMTP_HOST", "localhost"),
        "smtp_port": int(os.getenv("SMTP_PORT", "587")),
        "smtp_user": os.getenv("SMTP_USER", ""),
        "smtp_password": os.getenv("SMTP_PASSWORD", ""),
        "smtp_from_email": os.getenv("SMTP_FROM_EMAIL", "cdr-loader@localhost"),
        "email_recipients": [
            r.strip() for r in os.getenv("ALERT_EMAIL_RECIPIENTS", "").split(",") if r.strip()
        ],
        "max_retries": int(os.getenv("ALERT_MAX_RETRIES", "3")),
        "retry_delay": float(os.getenv("ALERT_RETRY_DELAY", "5")),
    }


def send_email_alert(subject: str, body: str, recipients: Optional[List[str]] = None) -> bool:
    """
    Send a plain-text alert email, retrying transient SMTP failures.

    Args:
        subject: Subject line, sent with the loader prefix
        body: Plain text body
        recipients: Recipient addresses (``ALERT_EMAIL_RECIPIENTS`` if None)

    Returns:
        True if the email was handed to the SMTP server, False otherwise
    """
    config = get_alerting_config()

    if not config["email_enabled"]:
        logger.debug("Email alerts are disabled")
        return False

    recipients = recipients or config["email_recipients"]
    if not recipients:
        logger.warning("No email recipients configured; alert '%s' dropped", subject)
        return False

    msg = MIMEText(body, "plain", "utf-8")
    msg["Subject"] = f"{SUBJECT_PREFIX} {subject}"
    msg["From"] = config["smtp_from_email"]
    msg["To"] = ", ".join(recipients)

    max_retries = max(config["max_retries"], 1)
    for attempt in range(1, max_retries + 1):
        try:
            with smtplib.SMTP(config["smtp_host"], config["smtp_port"]) as server:
                if config["smtp_user"] and config["smtp_password"]:
                    server.starttls()
                    server.login(config["smtp_user"], config["smtp_password"])
                server.sendmail(config["smtp_from_email"], recipients, msg.as_string())
            logger.info("Alert email sent to %d recipients: %s", len(recipients), subject)
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("Alert email attempt %d/%d failed: %s", attempt, max_retries, e)
            if attempt < max_retries:
                time.sleep(config["retry_delay"])

    logger.error("Giving up on alert email after %d attempts: %s", max_retries, subject)
    return False


def _error_details(error: Any) -> List[str]:
    """Body lines describing an ingestion error; extra attributes appear when set."""
    lines = [f"Error type: {type(error).__name__}"]

    line_number = getattr(error, "line_number", None)
    if line_number is not None:
        lines.append(f"Line: {line_number}")

    lines.append(f"Error: {str(error)[:_DETAIL_LIMIT]}")

    statement = getattr(error, "statement", None)
    if statement:
        lines.extend(["", "Failing statement:", statement[:_DETAIL_LIMIT]])
    return lines


def format_ingestion_failure_alert(error: Exception, source_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Describe an aborted run as an alert email.

    Args:
        error: The exception that aborted the run
        source_file: Extract file being processed (taken from the error if None)

    Returns:
        Dictionary with ``subject``, ``body`` and ``source_file``
    """
    source_file = source_file or getattr(error, "source_file", None)
    error_type = type(error).__name__

    if source_file:
        subject = f"Ingestion aborted on {source_file}: {error_type}"
        summary = (
            f"Extract ingestion stopped while processing '{source_file}'. The file was "
            "left in the scan directory and is retried on the next run; files after it "
            "were not processed."
        )
    else:
        subject = f"Ingestion aborted: {error_type}"
        summary = "Extract ingestion stopped while no extract file was being processed."

    body = [summary, "", f"Timestamp: {datetime.now(timezone.utc).isoformat()}"]
    if source_file:
        body.append(f"File: {source_file}")
    body.extend(_error_details(error))

    return {"subject": subject, "body": "\n".join(body), "source_file": source_file}


def format_task_failure_alert(context: Dict[str, Any]) -> Dict[str, Any]:
    """
    Describe a failed Airflow ingestion task as an alert email.

    Ingestion errors raised by the task keep their file, line and statement.

    Args:
        context: Airflow task instance context dictionary

    Returns:
        Dictionary with ``subject``, ``body`` and ``source_file``
    """
    ti = context.get("task_instance")
    dag = context.get("dag")
    dag_id = dag.dag_id if dag is not None else "unknown"
    task_id = ti.task_id if ti else context.get("task_id", "unknown")
    logical_date = context.get("logical_date", context.get("execution_date", "unknown"))
    exception = context.get("exception")

    if exception is not None:
        alert = format_ingestion_failure_alert(exception)
    else:
        alert = {"subject": "Task failed", "body": "No exception details available", "source_file": None}

    header = [
        f"DAG: {dag_id}",
        f"Task: {task_id}",
        f"Logical date: {logical_date}",
        f"Try number: {ti.try_number if ti else 'N/A'}",
        "",
    ]
    alert["subject"] = f"{dag_id}.{task_id}: {alert['subject']}"
    alert["body"] = "\n".join(header + [alert["body"]])
    return alert


def send_alert(alert_data: Dict[str, Any]) -> bool:
    """Send a formatted alert; returns whether it was delivered."""
    return send_email_alert(alert_data["subject"], alert_data["body"])


def task_failure_callback(context: Dict[str, Any]) -> None:
    """Airflow ``on_failure_callback`` that emails the failure."""
    send_alert(format_task_failure_alert(context))
