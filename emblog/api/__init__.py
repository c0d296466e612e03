from flask import request


def request_data():
    """Body of a JSON or multipart/form request as a plain dict."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def register_blueprints(app):
    from emblog.api.admin import bp as admin_bp
    from emblog.api.articles import bp as articles_bp
    from emblog.api.auth import bp as auth_bp
    from emblog.api.bookmarks import bp as bookmarks_bp
    from emblog.api.comments import bp as comments_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(articles_bp)
    app.register_blueprint(comments_bp)
    app.register_blueprint(bookmarks_bp)
    app.register_blueprint(admin_bp)
