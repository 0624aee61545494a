# No table of its own
# Aggregates are computed from resources, profiles and access_logs

"""
Reads:
- resources: status, type, id
- profiles: id, user_id (counts only)
- access_logs: timestamp, action, resource_id, user_id

Day buckets use UTC calendar days; every chart series includes the days
without any access so the x axis is continuous.
"""
