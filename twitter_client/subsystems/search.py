"""
Topic search and reply loop.

Replies to strangers' tweets: opt-in only (``TWITTER_SEARCH_ENABLE``).
"""

import random

import structlog

from .base import PeriodicSubsystem

logger = structlog.get_logger()

SEARCH_LIMIT = 20


class SearchSubsystem(PeriodicSubsystem):
    name = "search"

    def initial_delay(self) -> float:
        return 0.0

    def next_delay(self) -> float:
        minutes = random.randint(self.settings.search_interval_min, self.settings.search_interval_max)
        return minutes * 60.0

    async def tick(self):
        topics = list(self.runtime.topics or [])
        if not topics:
            logger.info("search.skipped", reason="no_topics")
            return

        topic = random.choice(topics)
        scraper = self.client.require_session()
        tweets = await scraper.search_tweets(topic, SEARCH_LIMIT)

        answered = set(await self.client.cache_get("search_replied") or [])
        me = self.client.username.lower()
        target = next(
            (
                t for t in tweets
                if str(t.get("username", "")).lower() != me and t.get("id") not in answered
            ),
            None,
        )
        if target is None:
            logger.info("search.no_candidate", topic=topic, results=len(tweets))
            return

        reply = await self.runtime.compose("reply", {"tweet": target, "topic": topic})
        if not reply:
            return

        await self.publish(reply, in_reply_to=target["id"])
        answered.add(target["id"])
        await self.client.cache_set("search_replied", sorted(answered))
        logger.info("search.replied", topic=topic, tweet_id=target["id"])
