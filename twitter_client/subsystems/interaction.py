"""
Mentions and target-user interaction loop.
"""

import structlog

from .base import PeriodicSubsystem

logger = structlog.get_logger()

FETCH_LIMIT = 20


def _tweet_order(tweet: dict) -> int:
    try:
        return int(tweet.get("id", 0))
    except (TypeError, ValueError):
        return 0


class InteractionSubsystem(PeriodicSubsystem):
    name = "interaction"

    def next_delay(self) -> float:
        return float(self.settings.poll_interval)

    async def tick(self):
        scraper = self.client.require_session()
        me = self.client.username

        tweets = list(await scraper.fetch_mentions(me, FETCH_LIMIT))
        for user in self.settings.target_user_list:
            tweets.extend(await scraper.fetch_user_tweets(user, FETCH_LIMIT))

        last_checked = int(await self.client.cache_get("last_checked_tweet_id") or 0)
        fresh = sorted(
            (
                t for t in tweets
                if _tweet_order(t) > last_checked and str(t.get("username", "")).lower() != me.lower()
            ),
            key=_tweet_order,
        )

        for tweet in fresh:
            reply = await self.runtime.compose("reply", {"tweet": tweet})
            if reply:
                await self.publish(reply, in_reply_to=str(tweet["id"]))
                logger.info("interaction.replied", tweet_id=tweet["id"], author=tweet.get("username"))
            # 无论是否回复都推进游标，避免重复处理
            last_checked = _tweet_order(tweet)
            await self.client.cache_set("last_checked_tweet_id", str(last_checked))

        logger.debug("interaction.checked", fetched=len(tweets), handled=len(fresh))
