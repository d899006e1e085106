"""Infrastructure: concrete provider clients"""
