class OzoError(Exception):
    """勤怠エージェントの基底例外"""


class ConfigError(OzoError):
    """認証情報が未設定・読み込み不可"""


class SessionError(OzoError):
    """ブラウザセッション操作の失敗"""


class LaunchError(SessionError):
    """ブラウザエンジンが起動できない"""


class AuthError(SessionError):
    """ログインに失敗した（入力欄が出ない・エラー表示・想定外の画面）"""
