"""
Page view tracking and dashboard aggregation.

Tracking stores one PageView per request reported by the browser and
keeps a UserSession row per client session id. The get_* functions
build the admin analytics dashboard from plain group-by queries.
"""
import re
from datetime import timedelta

from django.db import models
from django.db.models import Avg, Count
from django.db.models.functions import TruncDate
from django.utils import timezone

from .conf import blog_settings
from .models import PageView, Post, UserSession

TABLET_RE = re.compile(r"iPad|Tablet")
MOBILE_RE = re.compile(r"Mobile|Android|iPhone")


def parse_user_agent(user_agent):
    """
    Classify a user agent string.

    Returns:
        dict with device (Tablet/Mobile/Desktop), browser and os
    """
    user_agent = user_agent or ""

    if TABLET_RE.search(user_agent):
        device = "Tablet"
    elif MOBILE_RE.search(user_agent):
        device = "Mobile"
    else:
        device = "Desktop"

    # Edge and Chrome both claim Chrome; Chrome claims Safari.
    if "Edg" in user_agent:
        browser = "Edge"
    elif "Chrome" in user_agent:
        browser = "Chrome"
    elif "Firefox" in user_agent:
        browser = "Firefox"
    elif "Safari" in user_agent:
        browser = "Safari"
    else:
        browser = "Unknown"

    # Android claims Linux; iOS claims Mac OS X.
    if "Windows" in user_agent:
        os_name = "Windows"
    elif "Android" in user_agent:
        os_name = "Android"
    elif re.search(r"iPhone|iPad|iOS", user_agent):
        os_name = "iOS"
    elif "Mac" in user_agent:
        os_name = "macOS"
    elif "Linux" in user_agent:
        os_name = "Linux"
    else:
        os_name = "Unknown"

    return {"device": device, "browser": browser, "os": os_name}


def get_client_ip(request):
    """First X-Forwarded-For hop, then X-Real-IP, then REMOTE_ADDR."""
    forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return (
        request.META.get("HTTP_X_REAL_IP")
        or request.META.get("REMOTE_ADDR")
        or "unknown"
    )


def track_page_view(path, ip_address, user_agent="", referrer="", session_id="",
                    user=None, post=None):
    """
    Record a page view and roll it into the visitor's session.

    Returns:
        The created PageView
    """
    info = parse_user_agent(user_agent)
    page_view = PageView.objects.create(
        path=path,
        referrer=referrer or "",
        user_agent=user_agent or "",
        ip_address=ip_address,
        user=user,
        post=post,
        **info,
    )

    if session_id:
        touch_session(session_id, ip_address, user_agent, info, user=user)

    if post is not None:
        post.increment_view_count()

    return page_view


def touch_session(session_id, ip_address, user_agent, info, user=None):
    """Create the session on first sight, otherwise count one more view."""
    now = timezone.now()
    updated = UserSession.objects.filter(session_id=session_id).update(
        page_views=models.F("page_views") + 1,
        end_time=now,
        updated_at=now,
    )
    if updated:
        return

    session, created = UserSession.objects.get_or_create(
        session_id=session_id,
        defaults={
            "page_views": 1,
            "start_time": now,
            "user_agent": user_agent or "",
            "ip_address": ip_address,
            "user": user,
            **info,
        },
    )
    if not created:
        UserSession.objects.filter(pk=session.pk).update(
            page_views=models.F("page_views") + 1,
            end_time=now,
            updated_at=now,
        )


def end_session(session_id, duration):
    """
    Close a session with its duration in seconds.

    Returns:
        Number of sessions updated (0 for an unknown id)
    """
    now = timezone.now()
    return UserSession.objects.filter(session_id=session_id).update(
        end_time=now,
        duration=duration,
        bounced=duration < blog_settings.BOUNCE_THRESHOLD_SECONDS,
        updated_at=now,
    )


def _since(days):
    return timezone.now() - timedelta(days=days)


def _percentage(part, whole):
    if not whole:
        return 0
    return round(part / whole * 100, 2)


def get_overview(days=30):
    """Headline numbers for the last ``days`` days."""
    start = _since(days)
    views = PageView.objects.filter(created_at__gte=start)
    sessions = UserSession.objects.filter(created_at__gte=start)

    total_sessions = sessions.count()
    finished = sessions.filter(duration__isnull=False)
    average_duration = finished.aggregate(avg=Avg("duration"))["avg"] or 0
    bounced = sessions.filter(bounced=True).count()

    top_pages = (
        views.values("path")
        .annotate(views=Count("id"))
        .order_by("-views", "path")[:blog_settings.ANALYTICS_TOP_PAGES]
    )

    return {
        "total_views": views.count(),
        "unique_visitors": views.values("ip_address").distinct().count(),
        "total_sessions": total_sessions,
        "average_session_duration": round(average_duration),
        "bounce_rate": round(_percentage(bounced, total_sessions)),
        "top_pages": [
            {
                "path": row["path"],
                "views": row["views"],
                "title": "Blog Post" if row["path"].startswith("/posts/") else "Page",
            }
            for row in top_pages
        ],
    }


def get_popular_posts(limit=None):
    """Published posts with the most views."""
    limit = limit or blog_settings.ANALYTICS_POPULAR_POSTS
    posts = Post.objects.published().with_counts().order_by("-view_count", "-published_at")
    return [
        {
            "id": post.pk,
            "title": post.title,
            "slug": post.slug,
            "views": post.view_count,
            "likes": post.like_count,
            "comments": post.comment_count,
        }
        for post in posts[:limit]
    ]


def get_traffic_sources(days=30):
    """Page views grouped by referrer; an empty referrer counts as Direct."""
    rows = (
        PageView.objects.filter(created_at__gte=_since(days))
        .values("referrer")
        .annotate(visitors=Count("id"))
        .order_by()
    )
    merged = {}
    for row in rows:
        source = row["referrer"] or "Direct"
        merged[source] = merged.get(source, 0) + row["visitors"]

    total = sum(merged.values())
    ranked = sorted(merged.items(), key=lambda item: (-item[1], item[0]))
    return [
        {"source": source, "visitors": visitors, "percentage": _percentage(visitors, total)}
        for source, visitors in ranked
    ]


def get_device_breakdown(days=30):
    """Page views grouped by device class."""
    rows = (
        PageView.objects.filter(created_at__gte=_since(days))
        .values("device")
        .annotate(count=Count("id"))
        .order_by("-count", "device")
    )
    rows = [{"device": row["device"] or "Desktop", "count": row["count"]} for row in rows]
    total = sum(row["count"] for row in rows)
    for row in rows:
        row["percentage"] = _percentage(row["count"], total)
    return rows


def get_daily_analytics(days=30):
    """
    One entry per day for the last ``days`` days, oldest first.

    Days without traffic are included with zero counts.
    """
    today = timezone.localdate()
    first_day = today - timedelta(days=days - 1)

    view_rows = (
        PageView.objects.filter(created_at__date__gte=first_day)
        .annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(views=Count("id"), visitors=Count("ip_address", distinct=True))
        .order_by()
    )
    session_rows = (
        UserSession.objects.filter(created_at__date__gte=first_day)
        .annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(sessions=Count("id"))
        .order_by()
    )
    views_by_day = {row["day"]: row for row in view_rows}
    sessions_by_day = {row["day"]: row["sessions"] for row in session_rows}

    result = []
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        row = views_by_day.get(day, {})
        result.append({
            "date": day.isoformat(),
            "views": row.get("views", 0),
            "visitors": row.get("visitors", 0),
            "sessions": sessions_by_day.get(day, 0),
        })
    return result


def get_realtime_metrics():
    """Activity in the last hour, day and five minutes."""
    now = timezone.now()
    return {
        "active_sessions": UserSession.objects.filter(
            updated_at__gte=now - timedelta(hours=1)
        ).count(),
        "recent_views": PageView.objects.filter(
            created_at__gte=now - timedelta(days=1)
        ).count(),
        "online_users": UserSession.objects.filter(
            updated_at__gte=now - timedelta(minutes=5)
        ).count(),
    }


def get_dashboard(days=30):
    """Everything the analytics dashboard shows, in one dict."""
    return {
        "overview": get_overview(days),
        "popular_posts": get_popular_posts(),
        "traffic_sources": get_traffic_sources(days),
        "device_breakdown": get_device_breakdown(days),
        "daily_analytics": get_daily_analytics(days),
        "real_time_metrics": get_realtime_metrics(),
    }
