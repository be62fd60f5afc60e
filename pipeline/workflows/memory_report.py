"""Report Peak Memory.

Builds ``nargo`` once, then measures peak memory of the test programs with it
and keeps one sticky "memory" comment per pull request up to date.
"""

from __future__ import annotations

from pipeline.models import JobSpec, StepSpec, Trigger, WorkflowSpec, event_is, event_is_not

ARTIFACT_NAME = "nargo"
COMMENT_HEADER = "memory"
REPORT_HEADER = "# Memory Report\n"
RUST_TOOLCHAIN = "1.74.1"
PRIMARY_BRANCH = "master"

BUILD_JOB = JobSpec(
    key="build-nargo",
    matrix={"target": ["x86_64-unknown-linux-gnu"]},
    steps=(
        StepSpec(name="Checkout Noir repo", uses="actions/checkout"),
        StepSpec(name="Setup toolchain", uses="toolchain/rust", with_={"toolchain": RUST_TOOLCHAIN}),
        StepSpec(
            name="Rust cache",
            uses="cache/rust",
            with_={
                "key": "${{ matrix.target }}",
                "cache-on-failure": True,
                "save-if": event_is_not("merge_group"),
            },
        ),
        StepSpec(name="Build Nargo", run="cargo build --package nargo_cli --release"),
        StepSpec(
            name="Package artifacts",
            run="mkdir -p dist\ncp ./target/release/nargo ./dist/nargo\n",
        ),
        StepSpec(
            name="Upload artifact",
            uses="artifact/upload",
            with_={"name": ARTIFACT_NAME, "path": "./dist/*", "retention-days": 3},
        ),
    ),
)

REPORT_JOB = JobSpec(
    key="generate_memory_report",
    needs=("build-nargo",),
    permissions={"pull-requests": "write"},
    steps=(
        StepSpec(name="Checkout", uses="actions/checkout"),
        StepSpec(
            name="Download nargo binary",
            uses="artifact/download",
            with_={"name": ARTIFACT_NAME, "path": "./nargo"},
        ),
        StepSpec(
            name="Set nargo on PATH",
            run=(
                'nargo_binary="${{ github.workspace }}/nargo/nargo"\n'
                "chmod +x $nargo_binary\n"
                'echo "$(dirname $nargo_binary)" >> $GITHUB_PATH\n'
                'export PATH="$PATH:$(dirname $nargo_binary)"\n'
                "nargo -V\n"
            ),
        ),
        StepSpec(
            name="Generate Memory report",
            working_directory="./test_programs",
            run=(
                "chmod +x memory_report.sh\n"
                "./memory_report.sh\n"
                "mv memory_report.json ../memory_report.json\n"
            ),
        ),
        StepSpec(
            name="Parse memory report",
            id="memory_report",
            uses="bench-report/parse",
            with_={
                "report": "memory_report.json",
                "header": REPORT_HEADER,
                "memory_report": True,
            },
        ),
        StepSpec(
            name="Add memory report to sticky comment",
            condition=event_is("pull_request", "pull_request_target"),
            uses="comment/sticky",
            with_={
                "header": COMMENT_HEADER,
                "message": "${{ steps.memory_report.outputs.markdown }}",
            },
        ),
    ),
)

WORKFLOW = WorkflowSpec(
    name="Report Peak Memory",
    trigger=Trigger(push_branches=(PRIMARY_BRANCH,), pull_request=True),
    jobs=(BUILD_JOB, REPORT_JOB),
)
