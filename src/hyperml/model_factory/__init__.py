"""
Model Factory - Machine Learning Components

The model factory provides the pipeline stages, task trainers, registry and
evaluation primitives that hyperml models are assembled from.
"""
