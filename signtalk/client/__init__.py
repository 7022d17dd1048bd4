"""Trainer client: camera capture, feature extraction, k-NN training and recognition.

The camera and feature extractor modules pull in OpenCV and torch, so they are
imported from their own modules rather than re-exported here.
"""
from signtalk.client.classifier import KNNClassifier
from signtalk.client.errors import (
    CameraError,
    EmptyClassifierError,
    FeatureExtractionError,
    GatewayError,
    SignTalkError,
)
from signtalk.client.gateway import GatewayClient
from signtalk.client.session import LoadOutcome, RecognitionResult, RecognitionState, TrainerSession

__all__ = [
    'KNNClassifier',
    'CameraError',
    'EmptyClassifierError',
    'FeatureExtractionError',
    'GatewayError',
    'SignTalkError',
    'GatewayClient',
    'LoadOutcome',
    'RecognitionResult',
    'RecognitionState',
    'TrainerSession',
]
