# modulebuild.py
# Example build file: run `modulebuild build` from this directory.
# `modulebuild codeserver` and `modulebuild test-compile` run the separate goals.
from modulebuild.dsl import (
    code_server_step,
    compile_step,
    defaults,
    document_step,
    module,
    package_step,
    project,
    test_compile_step,
    translate_step,
)


def build():
    return project(
        module(
            "shared",
            sources=["shared/src/main/java"],
            output="shared/target/classes",
            compile=compile_step(),
            test_compile=test_compile_step("shared/src/test/java", output="shared/target/test-classes"),
        ),
        module(
            "client",
            sources=["client/src/main/java"],
            output="client/target/classes",
            compile=compile_step(),
            translate=translate_step("com.example.client.App", war_directory="client/target/war"),
            code_server=code_server_step(launcher_dir="client/target/war", port="9876"),
        ),
        module(
            "server",
            sources=["server/src/main/java"],
            output="server/target/classes",
            compile=compile_step(),
            document=document_step(
                "com.example.server.GreetingServiceImpl",
                output_directory="server/target/wsdl",
            ),
            package=package_step(
                "server/src/main/webapp",
                "server/target/server.war",
                additional_content_directories=["client/target/war"],
                fail_on_error=False,
            ),
        ),
        defaults=defaults(
            compile=compile_step(encoding="UTF-8"),
            translate=translate_step(enabled=False, style="PRETTY", jvm_arguments=["-Xmx1g"]),
        ),
        dependency_classpath=["lib"],
        default_source="17",
        default_target="17",
    )
