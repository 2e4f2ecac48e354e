# api/json_translator/repos/errors.py
# リポジトリ層の例外。status_code / title は routers/_helpers.to_problem が参照する。


class RepoError(Exception):
    status_code = 500
    title = "Internal"


class NotFound(RepoError):
    status_code = 404
    title = "Not Found"


class Conflict(RepoError):
    status_code = 409
    title = "Conflict"


class Validation(RepoError):
    status_code = 400
    title = "Validation"


class Transient(RepoError):
    status_code = 503
    title = "Transient"
