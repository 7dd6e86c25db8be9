from rest_framework_simplejwt.tokens import RefreshToken


def get_tokens_for_user(user):
    """Refresh/access pair carrying the user's role as a claim"""
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }
