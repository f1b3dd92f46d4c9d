from html import escape


def view(request, pages, page):
    title = escape(page["title"])
    return (
        f"<html><head><title>{title}</title>"
        '<link rel="stylesheet" href="/style.css"></head>'
        f"<body><h1>{title}</h1><p>{escape(page.get('text', ''))}</p></body></html>"
    )
