"""
Delivery of formatted reviews to the console and Slack.
"""
