from rest_framework import serializers


class AdminCredentialsSerializer(serializers.Serializer):
    email = serializers.CharField(error_messages={"blank": "Email is required."})
    password = serializers.CharField(
        write_only=True, trim_whitespace=False, error_messages={"blank": "Password is required."}
    )


__all__ = ["AdminCredentialsSerializer"]
