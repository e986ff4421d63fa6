"""
Module Core - Composants principaux de l'outil d'inventaire

Ce module contient :
- Le modèle de données unifié (Record)
- Les exceptions
- La configuration
- Le logging
- L'agrégation de l'inventaire
- La mise en forme de la sortie
"""
