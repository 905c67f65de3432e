from promptpack.compression.buckets import Bucket
from promptpack.compression.variants import (
    BucketVariant,
    CompressionContext,
    ContextBuilder,
    Duplicate,
    NoVariant,
    SignatureDuplicate,
    classify_variant,
)

PLOT_A = "plt.plot(train_loss)\nplt.title('loss')"
PLOT_B = "plt.plot(val_acc)\nplt.title('accuracy')"


class TestClassifyVariant:
    def test_no_context(self):
        assert classify_variant(None) == NoVariant()

    def test_priority(self):
        context = CompressionContext(
            index=5,
            bucket=Bucket.PLOTTING,
            bucket_primary_index=1,
            duplicate_of_index=2,
            signature_duplicate_of_index=3,
        )
        assert classify_variant(context) == Duplicate(2)

        context = CompressionContext(
            index=5, bucket_primary_index=1, signature_duplicate_of_index=3
        )
        assert classify_variant(context) == SignatureDuplicate(3)

        context = CompressionContext(index=5, bucket_primary_index=1)
        assert classify_variant(context) == BucketVariant(1)

    def test_primary_is_not_its_own_variant(self):
        context = CompressionContext(index=1, bucket=Bucket.PLOTTING, bucket_primary_index=1)
        assert classify_variant(context) == NoVariant()


class TestContextBuilder:
    def test_exact_duplicate(self):
        builder = ContextBuilder()
        first = builder.build(1, "def f(x):\n    return x")
        second = builder.build(2, "# same thing\ndef f(x):\n\n    return   x")
        assert classify_variant(first) == NoVariant()
        assert classify_variant(second) == Duplicate(1)
        # duplicates are not also signature duplicates
        assert second.signature_duplicate_of_index is None

    def test_signature_duplicate(self):
        builder = ContextBuilder()
        builder.build(1, "def f(x):\n    return x")
        context = builder.build(2, "def f(x):\n    return x * 2")
        assert classify_variant(context) == SignatureDuplicate(1)

    def test_bucket_variant(self):
        builder = ContextBuilder()
        first = builder.build(3, PLOT_A)
        second = builder.build(7, PLOT_B)
        assert first.bucket is Bucket.PLOTTING
        assert first.bucket_primary_index == 3
        assert classify_variant(second) == BucketVariant(3)

    def test_duplicates_do_not_become_bucket_primary(self):
        builder = ContextBuilder()
        builder.build(1, "def draw():\n    pass")
        duplicate = builder.build(2, "def draw():\n    plt.plot(b)")
        assert duplicate.bucket is Bucket.PLOTTING
        assert classify_variant(duplicate) == SignatureDuplicate(1)
        third = builder.build(3, PLOT_A)
        assert third.bucket_primary_index == 3
        assert classify_variant(third) == NoVariant()

    def test_other_bucket_has_no_variants(self):
        builder = ContextBuilder()
        builder.build(1, "x = 1")
        context = builder.build(2, "y = 2")
        assert context.bucket is Bucket.OTHER
        assert context.bucket_primary_index is None
        assert classify_variant(context) == NoVariant()

    def test_fresh_builder_per_run(self):
        code = "def f(x):\n    return x"
        ContextBuilder().build(1, code)
        assert classify_variant(ContextBuilder().build(2, code)) == NoVariant()
