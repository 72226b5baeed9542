"""
SMS Result Formatter

Renders job lists as reply lines. Lines are joined with newlines into one
outbound body; the 160 character segment size is a soft target, kept by
truncating titles and addresses rather than by splitting messages.

Line format:
    {index}. {icon} ${price} {title[:15]} | {address} | {posted_ago}
"""

from typing import List

from smsjobs.schemas import JobSearchResult

NO_JOBS_HINT = 'No jobs found. Try: "plumbing 77002" or "fence houston under 500"'
CLAIM_FOOTER = "Reply 1-5 to claim job"
DIGEST_HEADER = "☀️ Your top 5 matches today:"
DIGEST_FOOTER = "Reply # to claim"

TITLE_MAX = 15
ADDRESS_MAX = 20

URGENCY_ICONS = {
    "emergency": "🚨",
    "high": "⚡",
}
DEFAULT_ICON = "🔨"


def urgency_icon(urgency: str) -> str:
    return URGENCY_ICONS.get(urgency, DEFAULT_ICON)


def short_address(address: str) -> str:
    if len(address) > ADDRESS_MAX:
        return address[:ADDRESS_MAX - 3] + "..."
    return address


def format_job_line(index: int, job: JobSearchResult) -> str:
    return (
        f"{index}. {urgency_icon(job.urgency)} ${job.price} {job.title[:TITLE_MAX]}"
        f" | {short_address(job.address)} | {job.posted_ago}"
    )


def format_jobs(jobs: List[JobSearchResult]) -> List[str]:
    """
    Render search results as reply lines.

    Returns:
        The no-jobs hint alone for an empty list, otherwise a count
        header, one line per job and the claim footer (len(jobs) + 2 lines).
    """
    if not jobs:
        return [NO_JOBS_HINT]

    noun = "job" if len(jobs) == 1 else "jobs"
    lines = [f"Found {len(jobs)} {noun}:"]
    lines.extend(format_job_line(i, job) for i, job in enumerate(jobs, start=1))
    lines.append(CLAIM_FOOTER)
    return lines


def format_digest(jobs: List[JobSearchResult]) -> str:
    if not jobs:
        return NO_JOBS_HINT

    lines = [DIGEST_HEADER]
    lines.extend(f"{i}. ${job.price} {job.title}" for i, job in enumerate(jobs, start=1))
    lines.append(DIGEST_FOOTER)
    return "\n".join(lines)
