"""
Host operations setup package.

Provides the configuration layer, the step executor and the service
procedures (tunnel daemon redeploy, database container start).
"""
