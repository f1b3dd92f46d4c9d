from html import escape


def view(request, pages, page):
    posts = sorted((p for p in pages if p.path.startswith("/blog/")), key=lambda p: p.path)
    items = "".join(f'<li><a href="{p.path}">{escape(p["title"])}</a></li>' for p in posts)
    return (
        f"<html><head><title>{escape(page['title'])}</title>"
        '<link rel="stylesheet" href="/style.css"></head>'
        f"<body><h1>{escape(page['title'])}</h1><ul>{items}</ul></body></html>"
    )
