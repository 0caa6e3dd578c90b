"""
Third-party integrations: media storage, reCAPTCHA and EmailJS.
"""
