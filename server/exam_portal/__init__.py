"""
Exam Portal backend: exams, submissions and live proctoring alerts.
"""
