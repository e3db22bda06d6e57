from classifier_consensus.combination import BayesianConsensus, Phase
from classifier_consensus.crp import ChineseRestaurantProcess
from classifier_consensus.likelihood import LikelihoodEvaluator
from classifier_consensus.state import majority_vote
from classifier_consensus.statistics import SufficientStatistics
from classifier_consensus.store import PosteriorSummary, SampleStore

__all__ = [
    "BayesianConsensus",
    "ChineseRestaurantProcess",
    "LikelihoodEvaluator",
    "Phase",
    "PosteriorSummary",
    "SampleStore",
    "SufficientStatistics",
    "majority_vote",
]
