import platform


def page():
    return {
        "view": "page.py",
        "title": "Stats",
        "text": f"Built on Python {platform.python_version()}.",
    }
