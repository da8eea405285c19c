"""
Sentiment scorer.

Aggregates headline polarity into a 0-100 score:
  positive = 80, neutral = 50, negative = 20, averaged over all headlines,
  then +5 when the 24h change is positive, -5 otherwise.

No headlines reads as neutral (50). Labels: <= 40 negative, <= 60 neutral,
above that positive.
"""
from common.models import AnalysisResult, MarketRecord, NewsItem, Sentiment, SentimentSummary
from scoring.base import BaseScorer

POLARITY = {Sentiment.POSITIVE: 80, Sentiment.NEUTRAL: 50, Sentiment.NEGATIVE: 20}
NEUTRAL_SCORE = 50
MOMENTUM_BOOST = 5
NEGATIVE_CEILING = 40
NEUTRAL_CEILING = 60


def sentiment_label(score: int) -> Sentiment:
    if score <= NEGATIVE_CEILING:
        return Sentiment.NEGATIVE
    if score <= NEUTRAL_CEILING:
        return Sentiment.NEUTRAL
    return Sentiment.POSITIVE


class SentimentScorer(BaseScorer):
    def score(self, result: AnalysisResult) -> SentimentSummary:
        return self.summarize(result.news, result.market_data)

    def summarize(self, news: list[NewsItem], market: MarketRecord) -> SentimentSummary:
        counts = {s: sum(1 for n in news if n.sentiment == s) for s in Sentiment}
        if not news:
            score = NEUTRAL_SCORE
        else:
            average = sum(POLARITY[n.sentiment] for n in news) / len(news)
            boost = MOMENTUM_BOOST if market.change_percent_24h > 0 else -MOMENTUM_BOOST
            score = self.round_half_up(self.clamp(average + boost))

        self.logger.debug(f"{market.symbol}: sentiment {score}/100 from {len(news)} headlines")
        return SentimentSummary(
            score=score,
            label=sentiment_label(score),
            positive=counts[Sentiment.POSITIVE],
            neutral=counts[Sentiment.NEUTRAL],
            negative=counts[Sentiment.NEGATIVE],
        )
