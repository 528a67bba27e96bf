"""
Reporting of computed rankings.

Modules
-------
reporter : format_recommendations(), RecommendationLogger protocol, logging
           and remembering loggers, write_recommendations_json().
"""
